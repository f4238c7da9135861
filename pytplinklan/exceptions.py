"""Exceptions raised by pytplinklan.

Callers can tell "could not reach the device" (TPLinkTransportException)
apart from "the device replied but the reply was not understood"
(TPLinkSerializationException).
"""


class TPLinkDeviceException(Exception):
    """Base class for all errors raised by this package."""
    pass


class TPLinkTransportException(TPLinkDeviceException):
    """Socket bind, send or receive failed, including read timeouts."""
    pass


class TPLinkSerializationException(TPLinkDeviceException):
    """Reply was not valid JSON, or lacked the expected namespace/command."""
    pass


class TPLinkFramingException(TPLinkSerializationException):
    """Length-prefixed buffer was truncated or its header was wrong."""
    pass


class TPLinkUnsupportedOperation(TPLinkDeviceException):
    """The device does not support the requested operation."""
    pass


class TPLinkInvalidParameter(TPLinkDeviceException):
    """A valid operation was requested with an invalid parameter."""
    pass
