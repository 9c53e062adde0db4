from absolute_create.cli import main

main()
