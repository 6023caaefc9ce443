from typing import NamedTuple, Union

from eth_hash.auto import keccak
from eth_utils import is_hex_address, to_bytes, to_normalized_address

from errors import InvalidAddress, InvalidAmount, InvalidSignature

UINT256_MAX = 2**256 - 1
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# ---------- fixed-width helpers ----------

def u256(x: int) -> bytes:
    if isinstance(x, bool) or not isinstance(x, int):
        raise InvalidAmount(f"uint256 value must be an integer, got {x!r}")
    if x < 0 or x > UINT256_MAX:
        raise InvalidAmount(f"uint256 value out of range: {x}")
    return x.to_bytes(32, "big")

def normalize_address(a: str) -> str:
    # any-case "0x" + 40 hex -> lowercase; checksum is not enforced
    if not isinstance(a, str) or not is_hex_address(a):
        raise InvalidAddress(f"not a 20-byte hex address: {a!r}")
    return to_normalized_address(a)

def address_bytes(a: str) -> bytes:
    return to_bytes(hexstr=normalize_address(a))

def addr(a: str) -> bytes:
    # 20-byte address left-padded to 32 (EIP-712 encodeData for `address`)
    return b"\x00" * 12 + address_bytes(a)

def b32(x: bytes) -> bytes:
    assert len(x) == 32
    return x

def to_b32(x: Union[bytes, str]) -> bytes:
    # ValueError on bad hex or a length other than 32
    if isinstance(x, str):
        x = to_bytes(hexstr=x)
    x = bytes(x)
    if len(x) != 32:
        raise ValueError(f"expected a 32-byte word, got {len(x)} bytes")
    return x

def hexstr(x: bytes) -> str:
    return "0x" + x.hex()

# ---------- EIP-712 core ----------

EIP191_PREFIX = b"\x19\x01"

def eip712_digest(domain_separator: bytes, struct_hash: bytes) -> bytes:
    assert len(domain_separator) == 32
    assert len(struct_hash) == 32
    return keccak(EIP191_PREFIX + domain_separator + struct_hash)

# ---------- signatures (produced by an external signer) ----------

class Signature(NamedTuple):
    v: int
    r: bytes
    s: bytes

    def as_dict(self) -> dict:
        return {"v": self.v, "r": hexstr(self.r), "s": hexstr(self.s)}

def split_signature(sig: Union[bytes, str]) -> Signature:
    """
    Splits a 65-byte compact signature (r || s || v) into its parts.
    A raw recovery id (0/1) is lifted to 27/28, the form the verifier expects.
    """
    if isinstance(sig, str):
        sig = to_bytes(hexstr=sig)
    if len(sig) != 65:
        raise InvalidSignature(f"compact signature must be 65 bytes, got {len(sig)}")

    r = sig[:32]
    s = sig[32:64]
    v = sig[64]
    if v < 27:
        v += 27
    if v not in (27, 28):
        raise InvalidSignature(f"invalid recovery byte: {sig[64]}")
    return Signature(v, r, s)

def join_signature(signature: Signature) -> bytes:
    if signature.v not in (27, 28):
        raise InvalidSignature(f"invalid recovery byte: {signature.v}")
    return b32(signature.r) + b32(signature.s) + bytes([signature.v])
