from keccak_telemetry.server import main

main()
