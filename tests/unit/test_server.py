import signal

from keccak_telemetry.server import TelemetryServer, build_server


def test_build_server_uses_settings():
    server = build_server(host="127.0.0.1", port=3999)
    assert isinstance(server, TelemetryServer)
    assert server.config.host == "127.0.0.1"
    assert server.config.port == 3999


def test_second_signal_is_noop():
    server = build_server()
    server.handle_exit(signal.SIGTERM, None)
    assert server.should_exit is True
    assert server.force_exit is False

    server.handle_exit(signal.SIGINT, None)
    server.handle_exit(signal.SIGTERM, None)
    assert server.should_exit is True
    assert server.force_exit is False
