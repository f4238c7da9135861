import logging
import sys

from flask import Flask, json, request

from pytplinklan import (CachePolicy, Discover, TPLinkLANClient,
                         TPLinkSerializationException, TPLinkTransportException)

api = Flask(__name__)
clients = {}


def get_client(host):

    if host not in clients:
        clients[host] = TPLinkLANClient(host, cache_ttl=3)

    return clients[host]


@api.route('/discover', methods=['GET'])
def get_devices():

    devices = Discover.discover()

    return json.dumps({ip: {"kind": device.kind.value, "sysinfo": device.sys_info}
                       for ip, device in devices.items()}), 200


@api.route('/<host>/<namespace>/<command>', methods=['GET', 'POST'])
def execute(host, namespace, command):

    if request.method == 'POST':
        argument = request.get_json(silent=True)
        policy = CachePolicy.INVALIDATE_NAMESPACE
    else:
        argument = None
        policy = CachePolicy.READ_THROUGH

    try:
        result = get_client(host).execute(namespace, command, argument, policy)

    except TPLinkTransportException as ex:
        return json.dumps({"error": str(ex)}), 504

    except TPLinkSerializationException as ex:
        return json.dumps({"error": str(ex)}), 502

    return json.dumps(result), 200


if __name__ == '__main__':

    logging.basicConfig(level=logging.DEBUG)

    port = 8081

    if len(sys.argv) > 1:
        port = int(sys.argv[1])

    api.run(port=port)
