import logging
from typing import Dict

from .client import CachePolicy, TPLinkLANClient
from .exceptions import TPLinkInvalidParameter
from .tplinkdevice import TPLinkDevice

_LOGGER = logging.getLogger(__name__)


class TPLinkBulb(TPLinkDevice):
    """Representation of a TP-Link Smart Bulb (LB100/LB110/LB120).

    Bulbs report their sysinfo under "system" like plugs, but take system
    and lighting commands in the smartlife.iot namespaces.
    """

    SYSTEM_NAMESPACE = 'smartlife.iot.common.system'
    LIGHTING_NAMESPACE = 'smartlife.iot.smartbulb.lightingservice'
    # the light state is part of the cached sysinfo too
    MUTATION_POLICY = CachePolicy.INVALIDATE_ALL

    def __init__(self,
                 host: str,
                 port: int = TPLinkLANClient.DEFAULT_PORT,
                 timeout: float = TPLinkLANClient.DEFAULT_TIMEOUT,
                 cache_ttl: float = TPLinkDevice.DEFAULT_CACHE_TTL,
                 logger: logging.Logger = None) -> None:

        TPLinkDevice.__init__(
            self,
            host=host,
            port=port,
            timeout=timeout,
            cache_ttl=cache_ttl,
            logger=logger
        )

    @property
    def light_state(self) -> Dict:
        return self._query(self.LIGHTING_NAMESPACE, 'get_light_state',
                           cache_policy=CachePolicy.READ_THROUGH)

    def set_light_state(self, state: Dict) -> Dict:
        """
        Send a transition_light_state command, e.g. {"on_off": 1, "brightness": 40}.

        :return: the light state reported back by the bulb
        """
        return self._query(self.LIGHTING_NAMESPACE, 'transition_light_state',
                           state, self.MUTATION_POLICY)

    @property
    def is_on(self) -> bool:
        light_state = self.sys_info.get('light_state')

        if light_state is None:
            light_state = self.light_state

        return light_state.get('on_off') == 1

    def turn_on(self):
        _LOGGER.debug("Bulb turn_on called.")
        self.set_light_state({'on_off': 1})

    def turn_off(self):
        _LOGGER.debug("Bulb turn_off called.")
        self.set_light_state({'on_off': 0})

    @property
    def brightness(self) -> int:
        return self.light_state.get('brightness')

    def set_brightness(self, brightness: int):
        """
        Set the brightness, in percent.

        :raises TPLinkInvalidParameter: brightness outside 0-100
        """
        if (not isinstance(brightness, int) or isinstance(brightness, bool)
                or not 0 <= brightness <= 100):
            raise TPLinkInvalidParameter(
                "brightness must be an int between 0 and 100, got %r" % (brightness,))

        self.set_light_state({'brightness': brightness})
