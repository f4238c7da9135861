import logging

from .client import TPLinkLANClient
from .tplinkdevice import TPLinkDevice

_LOGGER = logging.getLogger(__name__)


class TPLinkPlug(TPLinkDevice):
    """Representation of a TP-Link Smart Plug (HS100/HS110).

    Usage example when used as library:
    p = TPLinkPlug("192.168.1.105")
    # print the alias
    print(p.alias)
    # change state of plug
    p.turn_on()
    p.turn_off()
    # query and print current state of plug
    print(p.state)

    Errors reported by the device are raised as Exceptions,
    and should be handled by the user of the library.
    """
    # switch states
    SWITCH_STATE_ON = 'ON'
    SWITCH_STATE_OFF = 'OFF'
    SWITCH_STATE_UNKNOWN = 'UNKNOWN'

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
    def state(self) -> str:
        """
        Retrieve the switch state

        :returns: one of
                  SWITCH_STATE_ON
                  SWITCH_STATE_OFF
                  SWITCH_STATE_UNKNOWN
        :rtype: str
        """
        relay_state = self.sys_info.get('relay_state')

        if relay_state == 0:
            return TPLinkPlug.SWITCH_STATE_OFF
        elif relay_state == 1:
            return TPLinkPlug.SWITCH_STATE_ON
        else:
            _LOGGER.warning("Unknown state %s returned.", relay_state)
            return TPLinkPlug.SWITCH_STATE_UNKNOWN

    @state.setter
    def state(self, value: str):
        """
        Set the new switch state

        :param value: one of
                    SWITCH_STATE_ON
                    SWITCH_STATE_OFF
        :raises ValueError: on invalid state

        """
        if not isinstance(value, str):
            raise ValueError("State must be str, not of %s." % type(value))
        elif value.upper() == TPLinkPlug.SWITCH_STATE_ON:
            self.turn_on()
        elif value.upper() == TPLinkPlug.SWITCH_STATE_OFF:
            self.turn_off()
        else:
            raise ValueError("State %s is not valid." % value)

    @property
    def is_on(self) -> bool:
        """
        Returns whether device is on.
        :return: True if device is on, False otherwise
        """
        return self.sys_info.get('relay_state') == 1

    def turn_on(self):
        """
        Turn the switch on.
        """
        _LOGGER.debug("Plug turn_on called.")
        self._query('system', 'set_relay_state', {'state': 1}, self.MUTATION_POLICY)

    def turn_off(self):
        """
        Turn the switch off.
        """
        _LOGGER.debug("Plug turn_off called.")
        self._query('system', 'set_relay_state', {'state': 0}, self.MUTATION_POLICY)

    @property
    def is_led_on(self) -> bool:
        return self.sys_info.get('led_off') == 0

    def turn_on_led(self):
        self._query('system', 'set_led_off', {'off': 0}, self.MUTATION_POLICY)

    def turn_off_led(self):
        self._query('system', 'set_led_off', {'off': 1}, self.MUTATION_POLICY)
