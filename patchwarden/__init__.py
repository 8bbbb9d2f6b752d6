"""
PatchWarden: LLM-assisted security and quality review of pull request diffs
"""

__version__ = "1.0.0"
