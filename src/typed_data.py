"""TypedDataEncoder: turns an order plus explicit domain parameters into the
EIP-712 digest an external signer signs and the settlement contract
recomputes.

The encoder never signs and never checks signatures.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

from eth_hash.auto import keccak
from eth_utils import to_bytes

from order_model import MultiAssetOrder, NormalOrder
from order_struct import DOMAIN_STRUCT, StructTypeDef, get_type_hash
from sign_core import addr, eip712_digest, hexstr, normalize_address, to_b32, u256

Order = Union[NormalOrder, MultiAssetOrder]

DEFAULT_DOMAIN_NAME = "LimitOrderProtocol"
DEFAULT_DOMAIN_VERSION = "1"


@dataclass(frozen=True)
class DomainParams:
    verifyingContract: str
    chainId: int = 1
    name: str = DEFAULT_DOMAIN_NAME
    version: str = DEFAULT_DOMAIN_VERSION

    def __post_init__(self):
        object.__setattr__(self, "verifyingContract", normalize_address(self.verifyingContract))
        u256(self.chainId)

    def as_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in DOMAIN_STRUCT.field_names()}


@dataclass(frozen=True)
class SignableTypedData:
    domain: DomainParams
    primary_type: StructTypeDef
    message: Mapping[str, Any]

    @property
    def types(self) -> Dict[str, StructTypeDef]:
        return {self.primary_type.name: self.primary_type}

    def as_dict(self) -> Dict[str, Any]:
        """JSON-compatible eth_signTypedData_v4 payload."""
        return {
            "types": {
                DOMAIN_STRUCT.name: DOMAIN_STRUCT.as_abi(),
                self.primary_type.name: self.primary_type.as_abi(),
            },
            "primaryType": self.primary_type.name,
            "domain": self.domain.as_dict(),
            "message": {k: hexstr(v) if isinstance(v, bytes) else v for k, v in self.message.items()},
        }


def encode_value(type_: str, value: Any) -> bytes:
    """One 32-byte encodeData word for an atomic or dynamic EIP-712 type."""
    if type_ == "address":
        return addr(value)
    if type_ == "bool":
        return u256(int(bool(value)))
    if type_.startswith("uint"):
        return u256(value)
    if type_ == "string":
        return keccak(value.encode("utf-8"))
    if type_ == "bytes":
        return keccak(to_bytes(hexstr=value) if isinstance(value, str) else bytes(value))
    if type_ == "bytes32":
        return to_b32(value)
    raise ValueError(f"unsupported EIP-712 field type: {type_}")


def hash_struct(struct: StructTypeDef, values: Mapping[str, Any]) -> bytes:
    encoded = get_type_hash(struct)
    for f in struct.fields:
        encoded += encode_value(f.type, values[f.name])
    return keccak(encoded)


def domain_separator(domain: DomainParams) -> bytes:
    return hash_struct(DOMAIN_STRUCT, domain.as_dict())


def encode(order: Order, domain: DomainParams) -> SignableTypedData:
    return SignableTypedData(domain=domain, primary_type=order.struct_def(), message=order.message())


def struct_hash(typed: SignableTypedData) -> bytes:
    return hash_struct(typed.primary_type, typed.message)


def digest(typed: SignableTypedData) -> bytes:
    return eip712_digest(domain_separator(typed.domain), struct_hash(typed))


def order_digest(order: Order, domain: DomainParams) -> bytes:
    return digest(encode(order, domain))
