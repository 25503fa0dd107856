from notion2obsidian.cli.main import main

main()
