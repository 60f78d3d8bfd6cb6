from geoscan.cli import main

main()
