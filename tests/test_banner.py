from hostrecon.banner import decode_banner, first_line, grab_banner


class SilentSocket:
    def __init__(self, exc):
        self.exc = exc
        self.timeout = None

    def settimeout(self, t):
        self.timeout = t

    def recv(self, n):
        raise self.exc


def test_decode_replaces_invalid_utf8():
    assert decode_banner(b"SSH-2.0-x\xff\r\n") == "SSH-2.0-x\ufffd\r\n"
    assert decode_banner(b"") == ""


def test_silence_is_not_an_error():
    import socket

    sock = SilentSocket(socket.timeout("timed out"))
    assert grab_banner(sock, n=64, timeout=0.05) == ""
    assert sock.timeout == 0.05


def test_reset_is_not_an_error():
    assert grab_banner(SilentSocket(ConnectionResetError())) == ""


def test_first_line_strips_control_characters():
    assert first_line("\r\n\x1b[31mHello\x07 world\r\nsecond") == "[31mHello world"
    assert first_line("") == ""
    assert first_line("x" * 200, max_len=10) == "xxxxxxxxxx..."
