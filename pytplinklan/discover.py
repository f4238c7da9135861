import enum
import json
import logging
import socket
from typing import Any, Dict, NamedTuple

from . import tplinkcrypto
from .client import TransportConfig, decode_reply, udp_socket
from .exceptions import TPLinkSerializationException, TPLinkTransportException

# Devices ignore the namespaces they do not implement, so one datagram is
# enough to reach plugs, strips, dimmers and bulbs alike.
PROBE = {
    "system": {"get_sysinfo": {}},
    "emeter": {"get_realtime": {}},
    "smartlife.iot.dimmer": {"get_dimmer_parameters": {}},
    "smartlife.iot.common.emeter": {"get_realtime": {}},
    "smartlife.iot.smartbulb.lightingservice": {"get_light_state": {}},
}


class DeviceKind(enum.Enum):
    PLUG = 'plug'
    BULB = 'bulb'
    POWER_STRIP = 'power_strip'
    UNKNOWN = 'unknown'


class DiscoveredDevice(NamedTuple):
    address: str
    kind: DeviceKind
    sys_info: Dict


def classify(sys_info: Dict) -> DeviceKind:
    """
    Work out the kind of device from its sysinfo.

    Plugs report ``type``, bulbs ``mic_type``. A plug with ``children``
    is a power strip.

    :raises TPLinkSerializationException: neither field is present
    """
    device_type = sys_info.get('type', sys_info.get('mic_type'))

    if device_type is None:
        raise TPLinkSerializationException(
            "sysinfo has neither type nor mic_type: %r" % (sys_info,))

    device_type = str(device_type).lower()

    if 'plug' in device_type and 'children' in sys_info:
        return DeviceKind.POWER_STRIP
    elif 'plug' in device_type:
        return DeviceKind.PLUG
    elif 'bulb' in device_type:
        return DeviceKind.BULB
    else:
        return DeviceKind.UNKNOWN


def device_from(address: str, data: bytes) -> DiscoveredDevice:
    """
    Build a DiscoveredDevice from one deciphered discovery reply.

    :raises TPLinkSerializationException: reply is malformed
    """
    reply = decode_reply(data)

    try:
        sys_info = reply['system']['get_sysinfo']
    except (KeyError, TypeError) as ex:
        raise TPLinkSerializationException(
            "Discovery reply from %s has no system.get_sysinfo" % address) from ex

    if not isinstance(sys_info, dict):
        raise TPLinkSerializationException(
            "Discovery reply from %s has a non-object sysinfo: %r" % (address, sys_info))

    return DiscoveredDevice(address, classify(sys_info), sys_info)


class Discover:

    @staticmethod
    def discover(logger: logging.Logger = None,
                 config: TransportConfig = None,
                 probe: Dict[str, Any] = None) -> Dict[str, DiscoveredDevice]:
        """
        Broadcast a probe and classify every device that answers.

        The sweep ends once the read timeout passes without another reply.
        Replies that cannot be understood are logged and skipped.

        :param config: socket parameters, defaults to TransportConfig.for_broadcast()
        :param probe: request object to broadcast, defaults to PROBE
        :rtype: dict
        :return: {ip address: DiscoveredDevice}
        :raises TPLinkTransportException: when the socket cannot be used
        """
        if logger is None:
            logger = logging.getLogger(__name__)

        if config is None:
            config = TransportConfig.for_broadcast()

        if probe is None:
            probe = PROBE

        logger.debug("Looking for all TP-Link devices on local network via %s:%s.",
                     config.host, config.port)

        request = tplinkcrypto.encrypt(
            json.dumps(probe, separators=(',', ':')).encode('utf-8'))

        try:
            with udp_socket(config) as sock:
                responses = Discover.collect(sock, config, request, logger)

        except OSError as ex:
            raise TPLinkTransportException("Discovery failed: %s" % ex) from ex

        devices = {}

        for address, data in responses.items():
            try:
                device = device_from(address, data)
            except TPLinkSerializationException as ex:
                logger.warning("Skipping device at %s: %s", address, ex)
                continue

            logger.info("Found TP-Link %s at %s", device.kind.value, address)
            devices[address] = device

        return devices

    @staticmethod
    def collect(sock, config: TransportConfig, request: bytes,
                logger: logging.Logger) -> Dict[str, bytes]:
        """
        Send the ciphered request and gather deciphered replies per address.

        The request is sent ``config.offline_tolerance`` times since UDP
        gives no delivery guarantee. Only the first reply from each address
        is kept.
        """
        address = (config.host, config.port)

        sock.settimeout(config.write_timeout)

        for _ in range(max(config.offline_tolerance, 1)):
            sock.sendto(request, address)

        sock.settimeout(config.read_timeout)
        responses = {}

        while True:
            try:
                data, (host, _) = sock.recvfrom(config.buffer_size)
            except (socket.timeout, BlockingIOError):
                break

            if host in responses:
                logger.debug("Dropping duplicate reply from %s", host)
                continue

            logger.debug("Reply from %s", host)
            responses[host] = tplinkcrypto.decrypt(data)

        return responses
