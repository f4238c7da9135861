# -*- coding: utf-8 -*-

"""
pyTPLinkLAN
This module provides a way to interface with TP-Link Smart Home devices,
such as smart plugs (e.g. HS100/HS110), power strips (e.g. HS300) and bulbs (e.g. LB110),
directly on the local network.

The devices listen on UDP port 9999 for JSON commands obfuscated with a simple
autokey XOR cipher (see `tplinkcrypto`). Each command names a namespace (a device
subsystem such as "system") and a command within it:

    {"system": {"get_sysinfo": {}}}

and the device answers with the same shape, holding the result.

The protocol core is `TPLinkLANClient`, which performs one request/response
exchange per call and can keep replies in a `ResponseCache`:

    x = TPLinkLANClient("192.168.1.1", cache_ttl=3)
    print(x.execute("system", "get_sysinfo"))

Devices on the local network can be found with a broadcast sweep:

    for ip, device in Discover.discover().items():
        print(ip, device.kind)

All common, shared functionality is available through `TPLinkDevice` class.
For device type specific actions `TPLinkPlug` or `TPLinkBulb` must be used instead.

Module-specific errors are raised as `TPLinkDeviceException` subclasses and are expected
to be handled by the user of the library.
"""

__author__ = """pytplinklan contributors"""
__version__ = '0.1.0'

# flake8: noqa
from .cache import Request, ResponseCache
from .client import CachePolicy, TPLinkLANClient, TransportConfig
from .discover import DeviceKind, Discover, DiscoveredDevice
from .exceptions import (TPLinkDeviceException, TPLinkFramingException,
                         TPLinkInvalidParameter, TPLinkSerializationException,
                         TPLinkTransportException, TPLinkUnsupportedOperation)
from .tplinkdevice import TPLinkDevice
from .tplinkplug import TPLinkPlug
from .tplinkbulb import TPLinkBulb
