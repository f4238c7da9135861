import contextlib
import enum
import json
import logging
import socket
from typing import Any, Dict, NamedTuple

from . import tplinkcrypto
from .cache import Request, ResponseCache
from .exceptions import TPLinkSerializationException, TPLinkTransportException

DEFAULT_PORT = 9999
DEFAULT_BUFFER_SIZE = 4096
DEFAULT_TIMEOUT = 3
BROADCAST_ADDRESS = "255.255.255.255"


class TransportConfig(NamedTuple):
    """Socket parameters for talking to one device (or to the broadcast address)."""

    host: str
    port: int = DEFAULT_PORT
    buffer_size: int = DEFAULT_BUFFER_SIZE
    read_timeout: float = DEFAULT_TIMEOUT
    write_timeout: float = DEFAULT_TIMEOUT
    broadcast: bool = False
    # number of times the discovery probe is sent
    offline_tolerance: int = 3

    @classmethod
    def for_broadcast(cls, port: int = DEFAULT_PORT, timeout: float = DEFAULT_TIMEOUT,
                      offline_tolerance: int = 3) -> 'TransportConfig':
        return cls(host=BROADCAST_ADDRESS, port=port, read_timeout=timeout,
                   write_timeout=timeout, broadcast=True,
                   offline_tolerance=offline_tolerance)


class CachePolicy(enum.Enum):
    UNCACHED = 'uncached'
    # serve from the cache, query the device on a miss
    READ_THROUGH = 'read_through'
    # drop cached replies of the namespace, then query the device
    INVALIDATE_NAMESPACE = 'invalidate_namespace'
    # drop every cached reply, then query the device (reboot, reset)
    INVALIDATE_ALL = 'invalidate_all'


@contextlib.contextmanager
def udp_socket(config: TransportConfig):
    """
    Bind an ephemeral UDP socket for a single exchange.

    The socket is closed on the way out, whatever happened inside.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    try:
        if config.broadcast:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)

        sock.bind(('', 0))
        yield sock

    finally:
        sock.close()


def decode_reply(data: bytes) -> Dict:
    """
    Parse a deciphered reply into a dict.

    :raises TPLinkSerializationException: reply is not a UTF-8 JSON object
    """
    try:
        value = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as ex:
        raise TPLinkSerializationException(
            "Could not parse device reply %r: %s" % (data[:64], ex)) from ex

    if not isinstance(value, dict):
        raise TPLinkSerializationException(
            "Device reply is not a JSON object: %r" % (value,))

    return value


class TPLinkLANClient:
    """
    Implementation of the TP-Link Smart Home protocol over UDP.

    Every call binds its own socket, sends one ciphered JSON datagram to the
    device and waits for a single reply. Nothing is retried: a timeout or
    socket error is raised as TPLinkTransportException, an unreadable reply
    as TPLinkSerializationException.

    When cache_ttl is given, replies can be served from a ResponseCache
    (see execute and CachePolicy). Instances are not meant to be shared
    between threads.
    """

    DEFAULT_PORT = DEFAULT_PORT
    DEFAULT_TIMEOUT = DEFAULT_TIMEOUT
    DEFAULT_BUFFER_SIZE = DEFAULT_BUFFER_SIZE

    def __init__(self, host: str,
                 port: int = DEFAULT_PORT,
                 timeout: float = DEFAULT_TIMEOUT,
                 buffer_size: int = DEFAULT_BUFFER_SIZE,
                 cache_ttl: float = None,
                 key_on_argument: bool = False,
                 logger: logging.Logger = None,
                 config: TransportConfig = None):
        """
        Initialise class with connection parameters

        :param str host: host name or ip address of the device
        :param port: UDP port the device listens on
        :param timeout: read and write timeout in seconds
        :param buffer_size: largest reply accepted, in bytes
        :param cache_ttl: seconds a reply stays cached, None disables the cache
        :param key_on_argument: include the command argument in cache keys
        :param config: full TransportConfig, overrides the other connection parameters
        """
        self.logger = logger

        if self.logger is None:
            self.logger = logging.getLogger(__name__)

        if config is None:
            config = TransportConfig(host=host, port=port, buffer_size=buffer_size,
                                     read_timeout=timeout, write_timeout=timeout)

        self.config = config
        self.cache = None

        if cache_ttl is not None:
            self.cache = ResponseCache(cache_ttl, key_on_argument=key_on_argument,
                                       logger=self.logger)

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def port(self) -> int:
        return self.config.port

    def execute(self, namespace: str, command: str, argument: Any = None,
                cache_policy: CachePolicy = CachePolicy.UNCACHED) -> Any:
        """
        Run one command on the device and return its result.

        :param namespace: device subsystem, e.g. "system"
        :param command: operation within the namespace, e.g. "get_sysinfo"
        :param argument: JSON-serialisable argument, None is sent as {}
        :param cache_policy: how the response cache is used for this call
        :return: the value found at reply[namespace][command]
        """
        request = Request(namespace, command, argument)

        if cache_policy is CachePolicy.READ_THROUGH and self.cache is not None:
            return self.cache.get_or_insert_with(request, self._send_request)

        if cache_policy is CachePolicy.INVALIDATE_NAMESPACE:
            self.invalidate(namespace)
        elif cache_policy is CachePolicy.INVALIDATE_ALL:
            self.invalidate()

        return self._send_request(request)

    def invalidate(self, namespace: str = None) -> None:
        """Forget cached replies of one namespace, or all of them."""
        if self.cache is None:
            return

        if namespace is None:
            self.cache.clear()
        else:
            self.cache.invalidate_namespace(namespace)

    def query(self, payload: Dict) -> Dict:
        """
        Send an arbitrary request object and return the whole decoded reply.

        :param payload: e.g. {"system": {"get_sysinfo": {}}, "time": {"get_time": {}}}
        """
        try:
            data = json.dumps(payload, separators=(',', ':')).encode('utf-8')
        except (TypeError, ValueError) as ex:
            raise TPLinkSerializationException(
                "Could not serialise request %r: %s" % (payload, ex)) from ex

        self.logger.debug('Sending message to %s:%s: %s',
                          self.config.host, self.config.port, data)

        reply = self.send_bytes(data)
        self.logger.debug('Reply received from %s: %s', self.config.host, reply)

        return decode_reply(reply)

    def send_bytes(self, data: bytes) -> bytes:
        """
        Cipher data, send it to the device and return the deciphered reply.

        :raises TPLinkTransportException: on socket errors and timeouts
        """
        address = (self.config.host, self.config.port)

        try:
            with udp_socket(self.config) as sock:
                sock.settimeout(self.config.write_timeout)
                sock.sendto(tplinkcrypto.encrypt(data), address)

                sock.settimeout(self.config.read_timeout)
                reply = sock.recv(self.config.buffer_size)

        except socket.timeout as ex:
            raise TPLinkTransportException(
                "Timed out after %ss waiting for %s:%s" % (
                    self.config.read_timeout, self.config.host, self.config.port)) from ex

        except OSError as ex:
            raise TPLinkTransportException(
                "Unable to reach %s:%s: %s" % (self.config.host, self.config.port, ex)) from ex

        return tplinkcrypto.decrypt(reply)

    def _send_request(self, request: Request) -> Any:

        reply = self.query(request.payload())

        try:
            return reply[request.namespace][request.command]
        except (KeyError, TypeError) as ex:
            raise TPLinkSerializationException(
                "Reply from %s has no %s.%s: %r" % (
                    self.config.host, request.namespace, request.command, reply)) from ex
