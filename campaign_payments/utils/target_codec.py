"""
Obfuscation of campaign targets (TikTok profile and video URLs) carried
in the on-chain call.

Two encoders have shipped in the web app:

- "v1": salt + url, base64, reversed and wrapped in "xad_" ... "_v1".
- "rot": letters rotated by 13 and digits by 5, then base64.

Until the on-chain encoder is pinned to one of them, decoding is selected
by version. "auto" sends bracketed input to v1 and everything else to rot.
"""
import base64
import binascii
from enum import Enum
from typing import Callable, Dict, Union

from campaign_payments.utils.logger import logger


V1_PREFIX = "xad_"
V1_SUFFIX = "_v1"
V1_SALT = "xad2024campaign"

# Returned when an input looks encoded but cannot be decoded
UNDECODABLE_TARGET = ""


class TargetCodecVersion(str, Enum):
    V1 = "v1"
    ROT = "rot"
    AUTO = "auto"


# ============== v1: salted reverse ==============

def encode_v1(target: str) -> str:
    encoded = base64.b64encode((V1_SALT + target).encode("utf-8")).decode("ascii")
    return V1_PREFIX + encoded[::-1] + V1_SUFFIX


def is_v1_encoded(value: str) -> bool:
    return (
        value.startswith(V1_PREFIX)
        and value.endswith(V1_SUFFIX)
        and len(value) >= len(V1_PREFIX) + len(V1_SUFFIX)
    )


def decode_v1(encoded: str) -> str:
    if not is_v1_encoded(encoded):
        return encoded

    reversed_body = encoded[len(V1_PREFIX):len(encoded) - len(V1_SUFFIX)][::-1]
    try:
        decoded = base64.b64decode(reversed_body, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        logger.warning("Failed to decode v1 target", extra={"reason": "invalid base64"})
        return UNDECODABLE_TARGET

    if not decoded.startswith(V1_SALT):
        logger.warning("Failed to decode v1 target", extra={"reason": "salt mismatch"})
        return UNDECODABLE_TARGET

    return decoded[len(V1_SALT):]


# ============== rot: rotate-13 / rotate-5 ==============

def _rotate(text: str, letter_shift: int, digit_shift: int) -> str:
    rotated = []
    for char in text:
        if "A" <= char <= "Z":
            rotated.append(chr((ord(char) - 65 + letter_shift) % 26 + 65))
        elif "a" <= char <= "z":
            rotated.append(chr((ord(char) - 97 + letter_shift) % 26 + 97))
        elif "0" <= char <= "9":
            rotated.append(chr((ord(char) - 48 + digit_shift) % 10 + 48))
        else:
            rotated.append(char)
    return "".join(rotated)


def encode_rot(target: str) -> str:
    return base64.b64encode(_rotate(target, 13, 5).encode("utf-8")).decode("ascii")


def decode_rot(encoded: str) -> str:
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        # Not base64 at all, so it was never obfuscated
        return encoded

    try:
        shifted = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Failed to decode rot target", extra={"reason": "invalid utf-8"})
        return UNDECODABLE_TARGET

    return _rotate(shifted, -13, -5)


# ============== Selector ==============

def _decode_auto(encoded: str) -> str:
    if is_v1_encoded(encoded):
        return decode_v1(encoded)
    return decode_rot(encoded)


_DECODERS: Dict[TargetCodecVersion, Callable[[str], str]] = {
    TargetCodecVersion.V1: decode_v1,
    TargetCodecVersion.ROT: decode_rot,
    TargetCodecVersion.AUTO: _decode_auto,
}

_ENCODERS: Dict[TargetCodecVersion, Callable[[str], str]] = {
    TargetCodecVersion.V1: encode_v1,
    TargetCodecVersion.ROT: encode_rot,
    TargetCodecVersion.AUTO: encode_v1,
}


def decode_target(encoded: str, version: Union[TargetCodecVersion, str] = TargetCodecVersion.V1) -> str:
    """
    Decode an obfuscated target. Never raises.

    Input that is not in the selected format is returned unchanged; input
    that is in the format but corrupt yields UNDECODABLE_TARGET.
    """
    return _DECODERS[TargetCodecVersion(version)](encoded)


def encode_target(target: str, version: Union[TargetCodecVersion, str] = TargetCodecVersion.V1) -> str:
    """Encode a target the way the web app does before building the call."""
    return _ENCODERS[TargetCodecVersion(version)](target)
