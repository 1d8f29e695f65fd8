import os

from tcpclient.config.config import apply_conf, load_config
from tcpclient.connection import DEFAULT_BUFFER_SIZE
from tcpclient.support.mixins import CommonEqualityMixin

CONFIG_NAME = 'tcpclient'

# validated against every merged configuration; supplies defaults for absent keys
configspec = [
    "timeout = float(min=0.001, default=3.0)",
    "buffer_size = integer(min=1, default=%d)" % DEFAULT_BUFFER_SIZE,
    "send_thread_name = string(default='tcp-send')",
    "receive_thread_name = string(default='tcp-receive')",
]


def check_timeout(timeout):
    if timeout is None or timeout <= 0:
        raise ValueError("timeout must be a positive number of seconds, not %r" % (timeout,))


class ClientSettings(CommonEqualityMixin):
    """
    Settings for a TcpClient.

    :param timeout: seconds allowed to connect, and for each read on an open connection. Must be positive:
        a zero timeout would put the sockets in non-blocking mode.
    :param buffer_size: the capacity of each read. A read that fills it is followed by another.
    """

    def __init__(self, timeout=3.0, buffer_size=DEFAULT_BUFFER_SIZE,
                 send_thread_name='tcp-send', receive_thread_name='tcp-receive'):
        check_timeout(timeout)
        self.timeout = timeout
        self.buffer_size = buffer_size
        self.send_thread_name = send_thread_name
        self.receive_thread_name = receive_thread_name

    def __repr__(self):
        return "ClientSettings(%s)" % ", ".join("%s=%r" % item for item in sorted(self.__dict__.items()))


def load_settings(directory=None, name=CONFIG_NAME, user_directory='~') -> ClientSettings:
    """
    Loads client settings from the layered configuration files named after name.
    :param directory: where the configuration files are. Defaults to the current directory.
    :raises ConfigObjError: when a value is invalid, such as a timeout that is not positive
    """
    conf = load_config(name, directory or os.getcwd(), configspec, user_directory)
    return apply_conf(conf, ClientSettings())
