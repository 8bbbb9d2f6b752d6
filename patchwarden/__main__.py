from patchwarden.main import main

main()
