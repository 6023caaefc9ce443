# ============================================================================
# PROJECT: Limit Order Protocol Off-Chain Toolkit v1.0
# MODULE: asset_commitment.py
# PURPOSE: Merkle commitment over the taker assets of a multi-asset order.
# ============================================================================

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

from eth_hash.auto import keccak

from errors import AssetNotFound, DuplicateAsset, EmptyAssetSet, InvalidAddress, InvalidAmount
from sign_core import address_bytes, hexstr, normalize_address, u256

# Combiner rule shared with the settlement contract's proof check. Changing
# any of these breaks every root already signed.
MERKLE_RULE = {
    "leaf": "keccak256(address(20) ++ uint256(32, big-endian))",
    "node": "keccak256(left ++ right)",
    "sort_pairs": False,
    "odd_node": "promote",
    # positional pairing needs the side of every sibling on the wire
    "proof_positions": "uint256 mask, bit i set = sibling of step i is on the left",
}


class TakerAsset(NamedTuple):
    address: str
    amount: int


AssetLike = Union[TakerAsset, Tuple[str, int], Mapping[str, object]]


def to_taker_asset(asset: AssetLike) -> TakerAsset:
    if isinstance(asset, Mapping):
        address, amount = asset["address"], asset["amount"]
    else:
        address, amount = asset
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"taker asset amount must be an integer, got {amount!r}")
    # range check happens here so a bad amount fails before hashing
    u256(amount)
    return TakerAsset(normalize_address(address), amount)


@dataclass(frozen=True)
class AssetSortResult:
    """
    Outcome of sorting a taker-asset set.
    `duplicate` names the first address that appears twice; `assets` is
    only set when the set is valid.
    """
    assets: Optional[Tuple[TakerAsset, ...]] = None
    duplicate: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.duplicate is None

    def unwrap(self) -> Tuple[TakerAsset, ...]:
        if self.duplicate is not None:
            raise DuplicateAsset(self.duplicate)
        return self.assets


def sort_taker_assets(assets: Iterable[AssetLike]) -> AssetSortResult:
    ordered = sorted((to_taker_asset(a) for a in assets), key=lambda a: a.address)
    for prev, cur in zip(ordered, ordered[1:]):
        if prev.address == cur.address:
            return AssetSortResult(duplicate=cur.address)
    return AssetSortResult(assets=tuple(ordered))


def taker_asset_leaf(address: str, amount: int) -> bytes:
    # solidityPack(["address", "uint256"], ...): no padding on the address
    return keccak(address_bytes(address) + u256(amount))


def hash_pair(left: bytes, right: bytes) -> bytes:
    return keccak(left + right)


def build_layers(leaves: List[bytes]) -> List[List[bytes]]:
    """All tree layers, leaves first and the root layer last."""
    if not leaves:
        raise EmptyAssetSet("cannot build a Merkle tree without leaves")
    layers = [list(leaves)]
    while len(layers[-1]) > 1:
        layer = layers[-1]
        nxt = []
        for i in range(0, len(layer), 2):
            if i + 1 < len(layer):
                nxt.append(hash_pair(layer[i], layer[i + 1]))
            else:
                nxt.append(layer[i])
        layers.append(nxt)
    return layers


class AssetCommitment:
    """
    Sorted taker assets, their leaves and the Merkle tree built over them.
    Immutable once built; the same asset set in any order yields the same root.
    """

    def __init__(self, assets: Tuple[TakerAsset, ...]):
        self._assets = assets
        self._index: Dict[str, int] = {a.address: i for i, a in enumerate(assets)}
        self._layers = build_layers([taker_asset_leaf(a.address, a.amount) for a in assets])

    @classmethod
    def build(cls, assets: Iterable[AssetLike]) -> "AssetCommitment":
        return cls(sort_taker_assets(assets).unwrap())

    @property
    def assets(self) -> Tuple[TakerAsset, ...]:
        return self._assets

    @property
    def layers(self) -> Tuple[Tuple[bytes, ...], ...]:
        return tuple(tuple(layer) for layer in self._layers)

    def leaf_hashes(self) -> Tuple[bytes, ...]:
        return tuple(self._layers[0])

    def root(self) -> bytes:
        return self._layers[-1][0]

    def hex_root(self) -> str:
        return hexstr(self.root())

    def depth(self) -> int:
        return len(self._layers) - 1

    def index_of(self, address: str) -> int:
        key = normalize_address(address)
        if key not in self._index:
            raise AssetNotFound(key)
        return self._index[key]

    def amount_of(self, address: str) -> int:
        return self._assets[self.index_of(address)].amount

    def __contains__(self, address: str) -> bool:
        try:
            return normalize_address(address) in self._index
        except InvalidAddress:
            return False

    def __len__(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"AssetCommitment(root={self.hex_root()}, assets={len(self._assets)})"
