import sys
import binascii

from pytplinklan import tplinkcrypto


class TPLinkPacket:

    def __init__(self, framed=False):

        self._framed = framed

    def Decrypt(self, hex_payload):

        data = binascii.unhexlify(hex_payload.replace(' ', '').replace(':', ''))

        if self._framed:
            return tplinkcrypto.decrypt_with_header(data, strict=False)

        return tplinkcrypto.decrypt(data)


# payloads captured with wireshark, UDP port 9999
packet = TPLinkPacket()
print(packet.Decrypt('d0f281f88bff9af7d5ef94b6d1b4c09fec95e68fe187e8caf08bf68bf6'))

packet = TPLinkPacket(framed=True)
print(packet.Decrypt('00000005c3a6caa6c9'))

for payload in sys.argv[1:]:
    print(TPLinkPacket(framed=payload.startswith('0000')).Decrypt(payload))
