from prdesc.cli import main

main()
