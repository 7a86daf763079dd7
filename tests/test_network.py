"""Tests for the TCP port check."""

import socket

import pytest

from larinit.integrations.network import is_port_available


@pytest.fixture
def listening_socket():
    """A socket listening on an ephemeral localhost port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock
    sock.close()


class TestIsPortAvailable:
    """Test is_port_available()."""

    def test_busy_port(self, listening_socket):
        port = listening_socket.getsockname()[1]

        assert is_port_available(port, host="127.0.0.1") is False

    def test_free_port(self):
        """A port released by another socket can be bound again."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("127.0.0.1", 0))
            port = sock.getsockname()[1]

        assert is_port_available(port, host="127.0.0.1") is True

    @pytest.mark.parametrize("port", [-1, 65536, 100000])
    def test_invalid_port(self, port):
        assert is_port_available(port) is False
