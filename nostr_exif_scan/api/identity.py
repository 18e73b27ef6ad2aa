"""NIP-19 encoding: npub decoding and nevent references for permalinks."""

from bech32 import bech32_decode, bech32_encode, convertbits

NPUB_PREFIX = "npub"
NEVENT_PREFIX = "nevent"

# nevent TLV types
_TLV_SPECIAL = 0


class IdentityDecodeError(Exception):
    """Raised when a public key string is not a valid npub."""
    pass


def _check_hex32(value: str, what: str) -> bytes:
    try:
        raw = bytes.fromhex(value)
    except ValueError as e:
        raise ValueError(f"{what} is not hex: {value!r}") from e
    if len(raw) != 32:
        raise ValueError(f"{what} must be 32 bytes, got {len(raw)}")
    return raw


def decode_npub(npub: str) -> str:
    """Decode an npub1... string to the 64-char hex public key.

    Raises:
        IdentityDecodeError: If the string is not a well-formed npub
    """
    hrp, data = bech32_decode(npub.strip().lower())
    if hrp is None or data is None:
        raise IdentityDecodeError("invalid bech32 string")
    if hrp != NPUB_PREFIX:
        raise IdentityDecodeError(f"expected '{NPUB_PREFIX}' prefix, got '{hrp}'")

    raw = convertbits(data, 5, 8, False)
    if raw is None or len(raw) != 32:
        raise IdentityDecodeError("public key must decode to 32 bytes")
    return bytes(raw).hex()


def encode_npub(pubkey_hex: str) -> str:
    """Encode a 64-char hex public key as npub1..."""
    raw = _check_hex32(pubkey_hex, "public key")
    return bech32_encode(NPUB_PREFIX, convertbits(raw, 8, 5))


def encode_nevent(event_id: str) -> str:
    """Encode an event id as a shareable nevent1... reference (no relay hints)."""
    raw = _check_hex32(event_id, "event id")
    tlv = bytes([_TLV_SPECIAL, len(raw)]) + raw
    return bech32_encode(NEVENT_PREFIX, convertbits(tlv, 8, 5))


def decode_nevent(nevent: str) -> str:
    """Return the hex event id carried in a nevent1... reference."""
    hrp, data = bech32_decode(nevent.strip().lower())
    if hrp != NEVENT_PREFIX or data is None:
        raise IdentityDecodeError("invalid nevent string")
    raw = bytes(convertbits(data, 5, 8, False) or b"")

    pos = 0
    while pos + 2 <= len(raw):
        tlv_type, length = raw[pos], raw[pos + 1]
        value = raw[pos + 2:pos + 2 + length]
        if tlv_type == _TLV_SPECIAL and len(value) == 32:
            return value.hex()
        pos += 2 + length
    raise IdentityDecodeError("nevent carries no event id")
