from heartpi.cli import main

main()
