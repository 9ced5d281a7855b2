from roast_relay.serve.server import main

main()
