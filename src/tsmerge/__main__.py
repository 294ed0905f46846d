from tsmerge.cli import main

main()
