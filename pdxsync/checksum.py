#!/usr/bin/env python3
"""
Content checksum for localization text.

CRC-32 over the UTF-8 bytes of the text, using the reversed polynomial
0xD5828281 instead of the zlib one. Values persisted in `#deepl:` annotations
were produced with this table, so it must not change.
"""

POLYNOMIAL = 0xD5828281


def _make_table(polynomial: int) -> list[int]:
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ polynomial
            else:
                crc >>= 1
        table.append(crc)
    return table


_TABLE = _make_table(POLYNOMIAL)


def checksum(text: str) -> int:
    """
    Compute the checksum of a localization text.

    Args:
        text: Text as it appears between the quotes

    Returns:
        Unsigned 32-bit checksum
    """
    crc = 0xFFFFFFFF
    for byte in text.encode("utf-8"):
        crc = _TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ 0xFFFFFFFF
