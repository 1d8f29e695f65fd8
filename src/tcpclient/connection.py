"""
A connection to one TCP endpoint.

Responses carry no length prefix or delimiter. A response is read in chunks of a fixed capacity, and a chunk
that comes back short marks the end of the response. When a response is an exact multiple of the capacity,
the read after the last chunk waits for the socket timeout before the response is returned.
"""
import logging
import socket
import threading

from tcpclient.conduit.base import Conduit
from tcpclient.connector.base import ConnectionClosedError, ConnectionClosedEvent
from tcpclient.connector.socketconn import Endpoint
from tcpclient.dispatch import ExecutorShutdownError, FutureValue, SerialExecutor
from tcpclient.result import IOResult
from tcpclient.support.events import EventSource

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 64
ENCODING = 'utf-8'


def tobytes(arg):
    """
    Converts a string to bytes
    >>> tobytes("abc")
    b'abc'
    >>> tobytes(b"abc")
    b'abc'
    """
    if isinstance(arg, str):
        arg = arg.encode(ENCODING)
    return bytes(arg)


def tostring(data):
    """
    >>> tostring(b'ping')
    'ping'
    """
    return bytes(data).decode(ENCODING, errors='replace')


class Connection:
    """
    Sends and receives data over a conduit to an endpoint.

    The synchronous methods run on the caller's thread. The asynchronous methods queue the
    synchronous ones on the send and receive executors, which may be shared with other connections.
    Fires ConnectionClosedEvent when closed.

    :param endpoint: the endpoint this connection was opened to
    :param conduit: the open conduit to the endpoint
    :param send_executor: runs asynchronous sends
    :param receive_executor: runs asynchronous receives and their callbacks
    :param buffer_size: the capacity of each read
    """

    def __init__(self, endpoint: Endpoint, conduit: Conduit, send_executor: SerialExecutor,
                 receive_executor: SerialExecutor, buffer_size=DEFAULT_BUFFER_SIZE):
        if buffer_size < 1:
            raise ValueError("buffer_size must be positive, got %s" % buffer_size)
        self.endpoint = endpoint
        self.conduit = conduit
        self.buffer_size = buffer_size
        self.events = EventSource()
        self._send_executor = send_executor
        self._receive_executor = receive_executor
        self._closed = False
        self._close_lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def remote_address(self):
        """ the peer's (address, port) as observed on the socket """
        return getattr(self.conduit, 'remote_address', None)

    def write(self, payload) -> IOResult:
        """
        Writes the whole payload and flushes the output.
        :param payload: bytes, or a string which is sent UTF-8 encoded
        :return: a successful result carrying the bytes written, or a failed result
        """
        data = tobytes(payload)
        if self._closed:
            return IOResult.failure(ConnectionClosedError("%s is closed" % self))
        try:
            output = self.conduit.output
            output.write(data)
            output.flush()
        except (OSError, ValueError) as e:
            return IOResult.failure(e)
        return IOResult.success(data)

    def read(self) -> IOResult:
        """
        Reads one response. Chunks of buffer_size are read until a chunk comes back short.
        A timeout after some data has arrived ends the response successfully.
        :return: a successful result carrying the response, or a failed result carrying the error
            and any bytes that arrived before it.
        """
        if self._closed:
            return IOResult.failure(ConnectionClosedError("%s is closed" % self))
        capacity = self.buffer_size
        received = bytearray()
        stream = self.conduit.input
        try:
            while True:
                buffer = bytearray(capacity)
                count = stream.readinto(buffer) or 0
                received += buffer[:count]
                if count < capacity:
                    break
        except socket.timeout as e:
            if not received:
                return IOResult.failure(e)
            logger.debug("%s: read timed out after %d bytes, treating as end of response" % (self, len(received)))
        except (OSError, ValueError) as e:
            return IOResult.failure(e, bytes(received))
        return IOResult.success(bytes(received))

    def send_sync(self, payload):
        """
        Sends the payload on the calling thread. Failures are logged and not raised.
        """
        logger.debug("%s: send %r" % (self, payload))
        result = self.write(payload)
        if not result.ok:
            logger.error("%s: send failed: %s" % (self, result.error))

    def receive_sync(self) -> bytes:
        """
        Receives a response on the calling thread. Failures are logged, and the bytes received before the
        failure are returned, which may be empty.
        """
        result = self.read()
        if not result.ok:
            logger.error("%s: receive failed: %s" % (self, result.error))
        logger.debug("%s: received %r" % (self, result.value))
        return result.value

    def receive_string_sync(self) -> str:
        return tostring(self.receive_sync())

    def send_and_receive(self, payload):
        """
        Sends the payload and returns the response, as a string when the payload is a string.
        """
        self.send_sync(payload)
        if isinstance(payload, str):
            return self.receive_string_sync()
        return self.receive_sync()

    def send(self, payload) -> FutureValue:
        """
        Queues the payload to be sent on the send executor.
        :return: a future that resolves once sent. It fails with ExecutorShutdownError when the executor
            has been shut down.
        """
        logger.debug("%s: queue send %r" % (self, payload))
        return self._submit(self._send_executor, self.send_sync, payload)

    def receive_bytes(self, callback=None) -> FutureValue:
        """
        Queues a receive on the receive executor.
        :param callback: called with the received bytes on the receive worker thread
        :return: a future that resolves to the received bytes, or fails as for send()
        """
        return self._submit(self._receive_executor, self._receive_then, self.receive_sync, callback)

    def receive_string(self, callback=None) -> FutureValue:
        """ as receive_bytes(), with the response decoded as UTF-8. """
        return self._submit(self._receive_executor, self._receive_then, self.receive_string_sync, callback)

    def _submit(self, executor, fn, *args):
        try:
            return executor.submit(fn, *args)
        except ExecutorShutdownError as e:
            logger.error("%s: %s" % (self, e))
            future = FutureValue()
            future.set_exception(e)
            return future

    @staticmethod
    def _receive_then(receive, callback):
        data = receive()
        if callback is not None:
            callback(data)
        return data

    def close(self):
        """
        Releases the conduit and notifies listeners that this connection is closed.
        Closing a closed connection does nothing.
        :raises CloseError: when part of the conduit could not be released. Listeners are still notified.
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        logger.debug("%s: close" % self)
        try:
            self.conduit.close()
        finally:
            self.events.fire(ConnectionClosedEvent(self))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __str__(self):
        return "Connection(%s)" % self.endpoint
