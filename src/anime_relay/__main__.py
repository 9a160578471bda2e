from anime_relay.main import main

main()
