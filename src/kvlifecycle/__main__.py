from kvlifecycle.cli import main

main()
