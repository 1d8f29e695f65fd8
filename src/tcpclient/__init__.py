"""

TCP client connections

- Conduit: abstraction of a bi-directional channel. Combines 2 streams for reading and writing.
  SocketConduit provides the streams for a connected socket.
- SocketConnector: dials an endpoint (host, port) and produces a SocketConduit. The read timeout
  is fixed when the socket is opened.
- Connection: sends and receives over one conduit. Responses have no length prefix or delimiter,
  so a response is read in fixed size chunks until a chunk comes back short.
- ConnectionRegistry: keeps at most one connection per endpoint. A closed connection is removed.
- TcpClient: owns a registry and the two background workers, and is the usual entry point.


## Threading

The synchronous send_sync()/receive_sync() run on the caller's thread and block until the socket call
returns or times out.

send() and receive_bytes()/receive_string() queue the synchronous calls on one of two workers owned by the
client: one for sends, one for receives. Each worker runs its jobs one at a time in the order queued,
whichever connection they are for. A receive that waits for its timeout holds up every receive queued
behind it. Receive callbacks run on the receive worker.

## Errors

ConnectError is raised when an endpoint cannot be reached. Errors reading or writing an open connection
are returned as a failed IOResult from write()/read(), and are logged and replaced with an empty
response by the convenience methods. CloseError is raised by close().

"""
