"""Byte, integer and DER helpers shared by the signature types."""

import logging
from typing import Any

import ecdsa
from ecdsa.der import UnexpectedDER
from eth_typing import HexStr
from eth_utils import decode_hex, encode_hex, is_hexstr, to_int

from evm_signature.exceptions import SignatureError

logger = logging.getLogger(__name__)

# secp256k1 curve order
SECP256K1_N = int("fffffffffffffffffffffffffffffffebaaedce6af48a03bbfd25e8cd0364141", 16)

ZERO_HASH = HexStr("0x" + "00" * 32)


def get_bytes(value: Any, argument: str = "value") -> bytes:
    """Convert a bytes-like value or a hex string into bytes."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str) and is_hexstr(value) and len(value) % 2 == 0:
        return decode_hex(value)
    raise SignatureError("invalid BytesLike value", argument, value)


def hexlify(data: bytes) -> HexStr:
    """Lowercase 0x-prefixed hex of ``data``."""
    return HexStr(encode_hex(data))


def get_big_int(value: Any, argument: str = "value") -> int:
    """
    Convert an integer-like value into an int.

    Accepts ints, decimal strings, 0x-prefixed hex strings and big-endian bytes.
    """
    if isinstance(value, bool):
        raise SignatureError("invalid BigNumberish value", argument, value)
    if isinstance(value, int):
        return value
    try:
        if isinstance(value, (bytes, bytearray)):
            return to_int(primitive=bytes(value))
        if isinstance(value, str):
            if value.startswith(("0x", "0X", "-0x", "-0X")):
                sign = -1 if value.startswith("-") else 1
                return sign * to_int(hexstr=HexStr(value.lstrip("-")))
            return to_int(text=value.strip())
    except ValueError as error:
        raise SignatureError("invalid BigNumberish value", argument, value) from error
    raise SignatureError("invalid BigNumberish value", argument, value)


def normalize_signature(der_sig: bytes) -> tuple[bytes, bytes, bool]:
    """
    Normalize a DER signature according to EIP-2.

    Returns:
        tuple: ``(r, s, flipped)`` where ``r`` and ``s`` are 32-byte big-endian
        scalars and ``flipped`` is True when ``s`` was replaced by ``n - s``,
        which also flips the recovery parity.
    """
    try:
        r, s = ecdsa.util.sigdecode_der(der_sig, ecdsa.SECP256k1.order)
    except (UnexpectedDER, ValueError) as error:
        raise SignatureError("invalid DER signature", "der_signature", der_sig) from error

    if not (0 < r < SECP256K1_N and 0 < s < SECP256K1_N):
        raise SignatureError("DER scalar out of range", "der_signature", der_sig)

    # Normalize s value
    flipped = s > SECP256K1_N // 2
    if flipped:
        logger.debug("Folding high-s DER signature into low-s form")
        s = SECP256K1_N - s

    return r.to_bytes(32, "big"), s.to_bytes(32, "big"), flipped
