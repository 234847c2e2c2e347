from monbattle.server.udp import main

main()
