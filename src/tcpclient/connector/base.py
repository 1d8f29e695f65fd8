class ConnectorError(Exception):
    """ Indicates an error condition with a connection. """


class ConnectError(ConnectorError):
    """ The connection could not be established: refused, unreachable or the host could not be resolved. """


class CloseError(ConnectorError):
    """ A resource could not be released while closing a connection. """


class ConnectionClosedError(ConnectorError):
    """ Indicates an operation was attempted on a connection that has been closed. """


class ConnectionEvent:
    """ base class for connection events. """
    def __init__(self, connection):
        self.connection = connection


class ConnectionOpenedEvent(ConnectionEvent):
    """ The connection was established. """


class ConnectionClosedEvent(ConnectionEvent):
    """ The connection was closed. """
