import logging
import threading

from tcpclient.connector.base import CloseError, ConnectionClosedEvent, ConnectionOpenedEvent
from tcpclient.connector.socketconn import Endpoint
from tcpclient.support.events import EventSource

logger = logging.getLogger(__name__)


class _DialLock:
    """ serializes dials to one endpoint. Kept while any thread is waiting on it. """
    def __init__(self):
        self.lock = threading.Lock()
        self.waiters = 0


class ConnectionRegistry:
    """
    Keeps at most one open connection per endpoint, so that repeated requests for an endpoint reuse
    the connection already established.

    A connection is removed from the registry when it is closed.
    Listeners added to events are told when a connection is registered (ConnectionOpenedEvent)
    and when a registered connection closes (ConnectionClosedEvent).

    :param factory  a callable taking an Endpoint and returning a new, open Connection to it.
        It should raise ConnectError when the endpoint cannot be reached.
    """

    def __init__(self, factory):
        self._factory = factory
        self._connections = dict()    # a map from Endpoint to Connection
        self._dialing = dict()        # a map from Endpoint to _DialLock
        self._lock = threading.Lock()
        self.events = EventSource()

    def get_or_create(self, host, port):
        """
        Retrieves the connection to the given endpoint, opening one if there is none.
        Concurrent first requests for the same endpoint open a single connection.
        :raises ConnectError: if a new connection could not be opened
        """
        endpoint = Endpoint(host, port)
        logger.debug("connection requested for %s" % endpoint)
        with self._lock:
            connection = self._connections.get(endpoint)
            if connection is not None:
                return connection
            dial_lock = self._dialing.get(endpoint)
            if dial_lock is None:
                dial_lock = self._dialing[endpoint] = _DialLock()
            dial_lock.waiters += 1
        try:
            with dial_lock.lock:
                return self._get_or_dial(endpoint)
        finally:
            with self._lock:
                dial_lock.waiters -= 1
                if not dial_lock.waiters:
                    del self._dialing[endpoint]

    def _get_or_dial(self, endpoint):
        """ called holding the endpoint's dial lock. """
        with self._lock:
            connection = self._connections.get(endpoint)
        if connection is None:
            connection = self._factory(endpoint)
            connection.events.add(self._connection_events)
            with self._lock:
                self._connections[endpoint] = connection
            logger.info("connection opened to %s" % endpoint)
            self.events.fire(ConnectionOpenedEvent(connection))
        return connection

    def get(self, host, port):
        """ retrieves the connection to the endpoint, or None if there isn't one. """
        with self._lock:
            return self._connections.get(Endpoint(host, port))

    def remove(self, host, port):
        """ forgets the connection to the endpoint without closing it. Does nothing when there is none. """
        with self._lock:
            connection = self._connections.pop(Endpoint(host, port), None)
        if connection is not None:
            connection.events.remove(self._connection_events)
            logger.debug("removed connection to %s:%s" % (host, port))
        return connection

    def discard(self, connection):
        """ forgets the given connection, provided it is still the one registered for its endpoint. """
        with self._lock:
            registered = self._connections.get(connection.endpoint)
            if registered is not connection:
                return False
            del self._connections[connection.endpoint]
        connection.events.remove(self._connection_events)
        logger.debug("removed connection to %s" % connection.endpoint)
        return True

    def _connection_events(self, event):
        if isinstance(event, ConnectionClosedEvent) and self.discard(event.connection):
            self.events.fire(event)

    @property
    def connections(self):
        """ a snapshot of the mapping from endpoint to connection. """
        with self._lock:
            return dict(self._connections)

    def close_all(self):
        """
        Closes every registered connection. All connections are closed even if some fail.
        :raises CloseError: the first failure, once all connections have been closed
        """
        failure = None
        for connection in self.connections.values():
            try:
                connection.close()
            except CloseError as e:
                logger.error("error closing %s: %s" % (connection, e))
                if failure is None:
                    failure = e
        if failure is not None:
            raise failure

    def __contains__(self, address):
        host, port = address
        return self.get(host, port) is not None

    def __len__(self):
        with self._lock:
            return len(self._connections)
