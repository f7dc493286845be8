from release_flow.cli.app import main

main()
