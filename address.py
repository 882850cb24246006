# address.py
import string

from errors import MalformedAddress
from geometry import ADDRESS_BITS

HEX_DIGITS = frozenset(string.hexdigits)
ADDRESS_DIGITS = ADDRESS_BITS // 4


def to_binary(address):
    """
    Expand an 8 digit hex address into its 32 character bit string.
    Digits a-f are accepted in either case.
    """
    if len(address) != ADDRESS_DIGITS:
        raise MalformedAddress(address, f"expected {ADDRESS_DIGITS} hex digits, got {len(address)}")
    for ch in address:
        if ch not in HEX_DIGITS:
            raise MalformedAddress(address, f"unknown hex value {ch!r}")
    return "{0:032b}".format(int(address, 16))


def _field(bits):
    return int(bits, 2) if bits else 0


def decode_address(address, geometry):
    """Return (tag, index, offset) for a hex address under the given geometry."""
    bits = to_binary(address)
    tag_end = geometry.tag_size
    index_end = tag_end + geometry.index_size
    return _field(bits[:tag_end]), _field(bits[tag_end:index_end]), _field(bits[index_end:])
