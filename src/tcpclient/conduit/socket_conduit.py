import io
import logging
import socket

from tcpclient.conduit import base
from tcpclient.connector.base import CloseError

logger = logging.getLogger(__name__)


class SocketStream(io.RawIOBase):
    """
    An unbuffered stream over a connected socket.

    readinto() returns as soon as any data is available, so callers see exactly how much
    each socket read delivered. A buffered reader would instead block until the buffer is full.
    """

    def __init__(self, sock: socket.socket, readable=True, writable=True):
        super().__init__()
        self.sock = sock
        self._readable = readable
        self._writable = writable

    def readable(self):
        return self._readable

    def writable(self):
        return self._writable

    def readinto(self, b):
        self._checkClosed()
        return self.sock.recv_into(b)

    def write(self, b):
        self._checkClosed()
        self.sock.sendall(b)
        return len(b)


class SocketConduit(base.Conduit):
    """
    A conduit that provides communication via a socket.
    :param sock The open, connected socket
    """
    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.read = SocketStream(sock, writable=False)
        self.write = SocketStream(sock, readable=False)

    @property
    def open(self) -> bool:
        return self.sock.fileno() >= 0

    @property
    def target(self):
        return self.sock

    @property
    def output(self):
        return self.write

    @property
    def input(self):
        return self.read

    @property
    def remote_address(self):
        """ the (address, port) of the peer as seen by the socket, or None when not connected. """
        try:
            return self.sock.getpeername()[:2]
        except OSError:
            return None

    def close(self):
        """
        Releases the input stream, the output stream and the socket. Each is attempted even when an
        earlier one fails. The first failure is raised as a CloseError once all have been tried.
        """
        failure = None
        for name, release in (("input", self.read.close), ("output", self.write.close),
                              ("shutdown", self._shutdown), ("socket", self.sock.close)):
            try:
                release()
            except OSError as e:
                logger.warning("error releasing %s of %s: %s" % (name, self.sock, e))
                if failure is None:
                    failure = e
        if failure is not None:
            raise CloseError("unable to release socket %s" % self.sock) from failure

    def _shutdown(self):
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass    # the peer may have closed the socket already
