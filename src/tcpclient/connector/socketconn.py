import logging
import socket

from tcpclient.conduit.socket_conduit import SocketConduit
from tcpclient.connector.base import ConnectError
from tcpclient.support.mixins import CommonEqualityMixin

logger = logging.getLogger(__name__)


class Endpoint(CommonEqualityMixin):
    """
    Describes a TCP server endpoint. The host string and port number are the identity of the endpoint:
    two endpoints naming the same machine differently are distinct.
    """
    def __init__(self, host, port):
        port = int(port)
        if not 0 <= port <= 65535:
            raise ValueError("port %d is out of range for %s" % (port, host))
        self.host = host
        self.port = port

    def key(self):
        """
        >>> Endpoint('127.0.0.1', 9000).key()
        '127.0.0.1:9000'
        """
        return "%s:%d" % (self.host, self.port)

    @property
    def address(self):
        return self.host, self.port

    def __hash__(self):
        return hash(self.address)

    def __repr__(self):
        return "Endpoint(%r, %d)" % (self.host, self.port)

    def __str__(self):
        return self.key()


class SocketConnector:
    """
    Dials TCP connections. Every conduit produced has the read timeout applied to all later
    socket operations.
    """
    def __init__(self, sock_args=(socket.AF_INET, socket.SOCK_STREAM), report_errors=True):
        """
        :param sock_args arguments for constructing each socket
        :param report_errors when False, failures to connect are logged at debug level only
        """
        self._sock_args = sock_args
        self._report_errors = report_errors

    def dial(self, host, port, timeout) -> SocketConduit:
        """
        Opens a socket to the given host and port.
        :param timeout: seconds allowed for the connect and for each subsequent read
        :raises ConnectError: when the socket cannot be opened
        :raises ValueError: when the timeout is not positive
        """
        if timeout is None or timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds, not %r" % (timeout,))
        sock = socket.socket(*self._sock_args)
        try:
            sock.settimeout(timeout)
            sock.connect((host, port))
        except (OSError, OverflowError, ValueError, TypeError) as e:
            sock.close()
            method = logger.warning if self._report_errors else logger.debug
            method("error opening socket to %s:%s: %s" % (host, port, e))
            raise ConnectError("unable to connect to %s:%s" % (host, port)) from e
        except BaseException:
            sock.close()
            raise
        logger.info("opened socket to %s:%s" % (host, port))
        return SocketConduit(sock)
