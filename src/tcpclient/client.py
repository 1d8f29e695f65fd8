import logging

from tcpclient.config.settings import ClientSettings
from tcpclient.connection import Connection, tostring
from tcpclient.connector.socketconn import SocketConnector
from tcpclient.dispatch import SerialExecutor
from tcpclient.registry import ConnectionRegistry
from tcpclient.result import IOResult

logger = logging.getLogger(__name__)


def empty_like(payload):
    """
    >>> empty_like('abc')
    ''
    >>> empty_like(b'abc')
    b''
    """
    return '' if isinstance(payload, str) else b''


class TcpClient:
    """
    Opens and reuses connections to TCP endpoints.

    The client owns a registry with at most one connection per endpoint, and two workers shared by all of its
    connections: one runs asynchronous sends, the other asynchronous receives. All asynchronous sends made through
    this client therefore run one after another in the order they were made, and likewise all receives.

    :param settings: the timeout, read capacity and worker names. Defaults are used when not given.
    :param connector: dials new connections. Defaults to a SocketConnector.
    """

    def __init__(self, settings: ClientSettings = None, connector: SocketConnector = None):
        self.settings = settings or ClientSettings()
        self.connector = connector or SocketConnector()
        self.send_executor = SerialExecutor(self.settings.send_thread_name)
        self.receive_executor = SerialExecutor(self.settings.receive_thread_name)
        self.registry = ConnectionRegistry(self._open_connection)

    def _open_connection(self, endpoint) -> Connection:
        conduit = self.connector.dial(endpoint.host, endpoint.port, self.settings.timeout)
        return Connection(endpoint, conduit, self.send_executor, self.receive_executor, self.settings.buffer_size)

    def get_or_create_connection(self, host, port) -> Connection:
        """
        Retrieves the open connection to host:port, connecting if there is none.
        :raises ConnectError: when a new connection cannot be established
        :raises ValueError: when the port is outside 0-65535
        """
        return self.registry.get_or_create(host, port)

    def request(self, host, port, payload) -> IOResult:
        """
        Sends the payload to host:port and reads the response.
        :return: the response, decoded when the payload is a string, or the first failure encountered.
            An endpoint that cannot be reached, or is not a valid address, is a failure.
        """
        try:
            connection = self.get_or_create_connection(host, port)
        except Exception as e:
            return IOResult.failure(e, empty_like(payload))
        sent = connection.write(payload)
        if not sent.ok:
            return IOResult.failure(sent.error, empty_like(payload))
        received = connection.read()
        if not received.ok:
            return IOResult.failure(received.error, empty_like(payload))
        return received.map(tostring) if isinstance(payload, str) else received

    def send_and_receive(self, host, port, payload):
        """
        Sends the payload to host:port and returns the response. Never raises: failures are logged
        and an empty response of the payload's type is returned.
        """
        result = self.request(host, port, payload)
        if not result.ok:
            logger.error("request to %s:%s failed: %s" % (host, port, result.error))
        return result.value

    def close(self):
        """
        Waits for queued sends and receives to run, then closes all connections.
        :raises CloseError: if a connection could not be released
        """
        try:
            self.send_executor.shutdown_worker()
            self.receive_executor.shutdown_worker()
        finally:
            self.registry.close_all()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
