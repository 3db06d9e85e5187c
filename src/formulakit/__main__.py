from formulakit.cli import main

main()
