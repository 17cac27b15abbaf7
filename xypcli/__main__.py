from xypcli.cli import main

main()
