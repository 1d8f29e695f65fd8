from abc import abstractmethod
from io import IOBase


class Conduit:
    """
    A conduit allows two-way communication. It provides a file-like input endpoint and a file-like output endpoint.
    The input must support readinto(buffer), the output write(buffer) and flush().
    """

    @property
    @abstractmethod
    def target(self):
        """ the underlying resource, such as the socket. """
        raise NotImplementedError

    @property
    @abstractmethod
    def input(self) -> IOBase:
        """ fetches the I/O stream that provides input. """
        raise NotImplementedError

    @property
    @abstractmethod
    def output(self) -> IOBase:
        """ fetches the I/O stream that receives output. """
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        """ determines if this conduit is open. When open, the streams provided by
            input and output can be read from/written to."""
        raise NotImplementedError

    @abstractmethod
    def close(self):
        """
        Closes the input stream, the output stream and the target.
        """
        raise NotImplementedError


class DefaultConduit(Conduit):
    """
    Provides the conduit streams from specific read/write file-like types (which may be the same value).
    A connector whose dial() returns this can run a TcpClient over any stream pair, such as in-memory
    streams in tests. It has no underlying resource, so target is None.
    """

    def __init__(self, read=None, write=None):
        self._read = read
        self._write = write if write is not None else read
        self._closed = False

    def close(self):
        self._closed = True
        self._write.close()
        if self._read is not self._write:
            self._read.close()

    @property
    def open(self):
        return not self._closed

    @property
    def target(self):
        return None

    @property
    def input(self) -> IOBase:
        return self._read

    @property
    def output(self) -> IOBase:
        return self._write
