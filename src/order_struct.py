import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from eth_hash.auto import keccak

from errors import InvalidStructDefinition


@dataclass(frozen=True)
class StructField:
    type: str
    name: str


@dataclass(frozen=True)
class StructTypeDef:
    """
    Ordered field declaration of an EIP-712 struct.
    Field order is load-bearing: it must match the verifying contract's struct.
    A field missing its type or its name (not only one missing both) is
    rejected with InvalidStructDefinition.
    """
    name: str
    fields: Tuple[StructField, ...]

    def signature(self) -> str:
        if not self.name:
            raise InvalidStructDefinition("struct has no name")
        if not self.fields:
            raise InvalidStructDefinition(f"struct {self.name} has no fields")
        parts = []
        for f in self.fields:
            if not f.type or not f.name:
                raise InvalidStructDefinition(f"struct {self.name} has a field without type or name")
            parts.append(f"{f.type} {f.name}")
        return f"{self.name}({','.join(parts)})"

    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def as_abi(self) -> list:
        # the [{type, name}, ...] shape eth_signTypedData expects
        return [{"name": f.name, "type": f.type} for f in self.fields]


def struct_def(name: str, *fields: Tuple[str, str]) -> StructTypeDef:
    return StructTypeDef(name, tuple(StructField(t, n) for t, n in fields))


# ---------- fixed schemas ----------

DOMAIN_STRUCT = struct_def(
    "EIP712Domain",
    ("string", "name"),
    ("string", "version"),
    ("uint256", "chainId"),
    ("address", "verifyingContract"),
)

NORMAL_ORDER_STRUCT = struct_def(
    "NormalOrder",
    ("address", "maker"),
    ("address", "taker"),
    ("address", "makerToken"),
    ("address", "takerToken"),
    ("uint256", "makerAmount"),
    ("uint256", "takerAmount"),
    ("uint256", "expiry"),
)

MULTI_ASSET_ORDER_STRUCT = struct_def(
    "MultiAssetOrder",
    ("address", "maker"),
    ("address", "taker"),
    ("address", "makerToken"),
    ("uint256", "makerAmount"),
    ("bytes32", "takerAssetMixHash"),
    ("uint256", "expiry"),
)


@lru_cache(maxsize=None)
def get_type_hash(struct: StructTypeDef) -> bytes:
    """
    keccak256 of the canonical `Name(type1 name1,...)` signature.
    Cached for the lifetime of the process.
    """
    return keccak(struct.signature().encode("utf-8"))


# Published for cross-checking against the verifying contract's constants.
DOMAIN_TYPEHASH = get_type_hash(DOMAIN_STRUCT)
NORMAL_ORDER_TYPEHASH = get_type_hash(NORMAL_ORDER_STRUCT)
MULTI_ASSET_ORDER_TYPEHASH = get_type_hash(MULTI_ASSET_ORDER_STRUCT)


# ---------- Solidity source ----------

_STRUCT_RE = re.compile(r"struct\s+([A-Za-z_]\w*)\s*\{([^}]*)\}", re.S)
_FIELD_RE = re.compile(r"^([A-Za-z_]\w*(?:\[\d*\])*)\s+([A-Za-z_]\w*)$")


def parse_solidity_struct(source: str) -> StructTypeDef:
    """
    Parses a declaration such as

        struct NormalOrder {
          address maker;
          ...
        }

    into a StructTypeDef with the fields in declared order.
    """
    m = _STRUCT_RE.search(source)
    if not m:
        raise InvalidStructDefinition("no struct declaration found")

    name, body = m.group(1), m.group(2)
    body = re.sub(r"//[^\n]*", "", body)
    fields = []
    for decl in body.split(";"):
        decl = " ".join(decl.split())
        if not decl:
            continue
        fm = _FIELD_RE.match(decl)
        if not fm:
            raise InvalidStructDefinition(f"cannot parse field '{decl}' in struct {name}")
        fields.append(StructField(fm.group(1), fm.group(2)))

    if not fields:
        raise InvalidStructDefinition(f"struct {name} has no fields")
    return StructTypeDef(name, tuple(fields))
