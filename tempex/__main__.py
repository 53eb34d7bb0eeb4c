from tempex.cli import main

main()
