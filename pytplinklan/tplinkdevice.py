"""
pytplinklan
Python library supporting TP-Link Smart Home devices (plugs, strips, bulbs) on the LAN.
"""
import logging
from typing import Any, Dict

from .client import CachePolicy, TPLinkLANClient
from .exceptions import (TPLinkDeviceException, TPLinkUnsupportedOperation)

# error codes devices put in a reply when they do not know a namespace or command
UNSUPPORTED_ERROR_CODES = (-1, -2)


class TPLinkDevice(object):
    """
    Commands shared by every TP-Link device.

    Reads of the sysinfo go through the response cache; anything that changes
    the device drops the cached replies first.
    """

    SYSTEM_NAMESPACE = 'system'
    # cache policy for commands that change device state
    MUTATION_POLICY = CachePolicy.INVALIDATE_NAMESPACE
    DEFAULT_CACHE_TTL = 3

    def __init__(self,
                 host: str,
                 port: int = TPLinkLANClient.DEFAULT_PORT,
                 timeout: float = TPLinkLANClient.DEFAULT_TIMEOUT,
                 cache_ttl: float = DEFAULT_CACHE_TTL,
                 logger: logging.Logger = None) -> None:
        """
        Create a new TPLinkDevice instance.

        :param str host: host name or ip address on which the device listens
        :param cache_ttl: seconds to keep replies, None to always ask the device
        """
        self.host = host

        if logger is None:
            self.logger = logging.getLogger(__name__)
        else:
            self.logger = logger

        self.client = TPLinkLANClient(
            host,
            port=port,
            timeout=timeout,
            cache_ttl=cache_ttl,
            logger=self.logger
        )

    @classmethod
    def from_discovery(cls, device, **kwargs) -> 'TPLinkDevice':
        """Build the handle matching a DiscoveredDevice."""
        from .discover import DeviceKind
        from .tplinkbulb import TPLinkBulb
        from .tplinkplug import TPLinkPlug

        if device.kind is DeviceKind.PLUG:
            return TPLinkPlug(device.address, **kwargs)
        elif device.kind is DeviceKind.BULB:
            return TPLinkBulb(device.address, **kwargs)

        return TPLinkDevice(device.address, **kwargs)

    def _query(self, namespace: str, command: str, argument: Any = None,
               cache_policy: CachePolicy = CachePolicy.UNCACHED) -> Any:

        result = self.client.execute(namespace, command, argument, cache_policy)

        if isinstance(result, dict) and result.get('err_code', 0) != 0:
            err_code = result['err_code']
            message = "%s.%s failed on %s: %s (%s)" % (
                namespace, command, self.host, result.get('err_msg'), err_code)

            if err_code in UNSUPPORTED_ERROR_CODES:
                raise TPLinkUnsupportedOperation(message)

            raise TPLinkDeviceException(message)

        return result

    @property
    def sys_info(self) -> Dict:
        """
        Returns the device sysinfo, served from the cache when still fresh.
        """
        return self._query('system', 'get_sysinfo',
                           cache_policy=CachePolicy.READ_THROUGH)

    @property
    def alias(self) -> str:
        return self.sys_info.get('alias')

    @property
    def model(self) -> str:
        return self.sys_info.get('model')

    @property
    def mac(self) -> str:
        sys_info = self.sys_info
        return sys_info.get('mac', sys_info.get('mic_mac'))

    @property
    def device_type(self) -> str:
        sys_info = self.sys_info
        return sys_info.get('type', sys_info.get('mic_type'))

    def set_alias(self, alias: str) -> None:
        self._query(self.SYSTEM_NAMESPACE, 'set_dev_alias', {'alias': alias},
                    self.MUTATION_POLICY)

    def reboot(self, delay: int = 1) -> None:
        """
        Reboot the device after delay seconds.
        """
        self.logger.debug("Rebooting %s in %ss", self.host, delay)
        self._query(self.SYSTEM_NAMESPACE, 'reboot', {'delay': delay},
                    CachePolicy.INVALIDATE_ALL)

    def factory_reset(self, delay: int = 1) -> None:
        """
        Reset the device to factory settings after delay seconds.
        """
        self.logger.debug("Resetting %s in %ss", self.host, delay)
        self._query(self.SYSTEM_NAMESPACE, 'reset', {'delay': delay},
                    CachePolicy.INVALIDATE_ALL)

    @property
    def is_on(self) -> bool:
        raise TPLinkUnsupportedOperation(
            "%s does not know how to read the state of %s" % (
                self.__class__.__name__, self.host))

    @property
    def is_off(self) -> bool:
        return not self.is_on

    def turn_on(self) -> None:
        raise TPLinkUnsupportedOperation(
            "%s cannot switch %s" % (self.__class__.__name__, self.host))

    def turn_off(self) -> None:
        raise TPLinkUnsupportedOperation(
            "%s cannot switch %s" % (self.__class__.__name__, self.host))

    @property
    def is_led_on(self) -> bool:
        raise TPLinkUnsupportedOperation(
            "%s has no LED control for %s" % (self.__class__.__name__, self.host))

    def turn_on_led(self) -> None:
        raise TPLinkUnsupportedOperation(
            "%s has no LED control for %s" % (self.__class__.__name__, self.host))

    def turn_off_led(self) -> None:
        raise TPLinkUnsupportedOperation(
            "%s has no LED control for %s" % (self.__class__.__name__, self.host))

    def __repr__(self):
        return "<%s at %s:%s>" % (self.__class__.__name__, self.host, self.client.port)
