import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from asset_commitment import AssetCommitment, AssetLike
from errors import InvalidAmount
from order_struct import MULTI_ASSET_ORDER_STRUCT, NORMAL_ORDER_STRUCT, StructTypeDef
from proof_service import ProofStep, get_proof
from sign_core import ZERO_ADDRESS, normalize_address, u256

# expiry = now + window when the maker leaves it out
DEFAULT_EXPIRY_WINDOW = 500


def _amount(fields: Mapping[str, Any], name: str) -> int:
    if name not in fields:
        raise InvalidAmount(f"missing amount field: {name}")
    value = fields[name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer, got {value!r}")
    u256(value)
    return value


def _taker(fields: Mapping[str, Any]) -> str:
    taker = fields.get("taker")
    return normalize_address(taker) if taker else ZERO_ADDRESS


def _expiry(fields: Mapping[str, Any], now: Optional[float]) -> int:
    if fields.get("expiry") is not None:
        return _amount(fields, "expiry")
    if now is None:
        now = time.time()
    return int(now + DEFAULT_EXPIRY_WINDOW)


@dataclass(frozen=True)
class NormalOrder:
    maker: str
    taker: str
    makerToken: str
    takerToken: str
    makerAmount: int
    takerAmount: int
    expiry: int

    STRUCT = NORMAL_ORDER_STRUCT

    @classmethod
    def create(cls, fields: Mapping[str, Any], now: Optional[float] = None) -> "NormalOrder":
        """
        `taker` defaults to the zero address (any taker may fill) and
        `expiry` to `now + DEFAULT_EXPIRY_WINDOW`.
        """
        return cls(
            maker=normalize_address(fields["maker"]),
            taker=_taker(fields),
            makerToken=normalize_address(fields["makerToken"]),
            takerToken=normalize_address(fields["takerToken"]),
            makerAmount=_amount(fields, "makerAmount"),
            takerAmount=_amount(fields, "takerAmount"),
            expiry=_expiry(fields, now),
        )

    def struct_def(self) -> StructTypeDef:
        return self.STRUCT

    def message(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.STRUCT.field_names()}


@dataclass(frozen=True)
class MultiAssetOrder:
    maker: str
    taker: str
    makerToken: str
    makerAmount: int
    takerAssetMixHash: bytes
    expiry: int
    # retained for fills; only the root above is signed
    commitment: AssetCommitment = field(repr=False, compare=False)

    STRUCT = MULTI_ASSET_ORDER_STRUCT

    @classmethod
    def create(
        cls,
        fields: Mapping[str, Any],
        assets: Iterable[AssetLike],
        now: Optional[float] = None,
    ) -> "MultiAssetOrder":
        commitment = AssetCommitment.build(assets)
        return cls(
            maker=normalize_address(fields["maker"]),
            taker=_taker(fields),
            makerToken=normalize_address(fields["makerToken"]),
            makerAmount=_amount(fields, "makerAmount"),
            takerAssetMixHash=commitment.root(),
            expiry=_expiry(fields, now),
            commitment=commitment,
        )

    @property
    def taker_assets(self):
        return self.commitment.assets

    def get_taker_asset_proof(self, address: str) -> List[ProofStep]:
        return get_proof(self.commitment, address)

    def taker_asset_amount(self, address: str) -> int:
        return self.commitment.amount_of(address)

    def struct_def(self) -> StructTypeDef:
        return self.STRUCT

    def message(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.STRUCT.field_names()}
