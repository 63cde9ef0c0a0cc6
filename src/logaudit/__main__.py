from logaudit.cli.main import main

main()
