""" Obfuscation routines used on the wire by TP-Link Smart Home devices

    Every UDP payload is JSON run through an autokey XOR cipher:

        The key starts out as the fixed byte 0xAB (171)

        Each plaintext byte is XOR'ed with the key, and the resulting byte becomes the key for the next one

        The TCP flavour of the protocol prefixes the body with a 4 byte big-endian length of the plaintext

    This is obfuscation only, anyone who knows the initial key can read the traffic.
"""

import struct

from .exceptions import TPLinkFramingException

INITIAL_KEY = 0xAB
HEADER = struct.Struct(">I")


def encrypt(plaintext: bytes) -> bytes:

    key = INITIAL_KEY
    result = bytearray()

    for byte in plaintext:
        key ^= byte
        result.append(key)

    return bytes(result)


def decrypt(ciphertext: bytes) -> bytes:

    key = INITIAL_KEY
    result = bytearray()

    for byte in ciphertext:
        result.append(byte ^ key)
        key = byte

    return bytes(result)


def encrypt_with_header(plaintext: bytes) -> bytes:

    return HEADER.pack(len(plaintext)) + encrypt(plaintext)


def decrypt_with_header(data: bytes, strict: bool = True) -> bytes:
    """
    Strip the length header and decrypt the body.

    :param data: header followed by the ciphered body
    :param strict: reject buffers whose declared length does not match the body
    :return: plaintext
    :raises TPLinkFramingException: when strict and the framing is inconsistent
    """
    if len(data) < HEADER.size:

        if strict:
            raise TPLinkFramingException(
                "framed message is %d bytes, shorter than the %d byte header" % (len(data), HEADER.size))

        return b""

    body = data[HEADER.size:]

    if strict:
        (length,) = HEADER.unpack_from(data)

        if length != len(body):
            raise TPLinkFramingException(
                "header declares %d bytes but %d follow" % (length, len(body)))

    return decrypt(body)
