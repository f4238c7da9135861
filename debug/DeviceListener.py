import json
import logging
import sys

from pytplinklan import Discover, TransportConfig

logging.basicConfig(level=logging.DEBUG)

target = "255.255.255.255"

if len(sys.argv) > 1:
    target = sys.argv[1]

config = TransportConfig(target, broadcast=True, read_timeout=3, write_timeout=3)

devices = Discover.discover(config=config)

for ip, device in devices.items():
    print("%s - %s" % (ip, device.kind.value))
    print(json.dumps(device.sys_info, indent=2, sort_keys=True))

print("%d device(s) found" % len(devices))
