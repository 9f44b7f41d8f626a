from ecalc.main import main

main()
