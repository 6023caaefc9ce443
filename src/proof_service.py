from typing import List, NamedTuple, Sequence, Union

from asset_commitment import AssetCommitment, hash_pair, taker_asset_leaf
from errors import InvalidAddress, InvalidAmount
from sign_core import hexstr, to_b32

LEFT = "left"
RIGHT = "right"


class ProofStep(NamedTuple):
    sibling: bytes
    position: str  # side the sibling sits on

    def as_dict(self) -> dict:
        return {"position": self.position, "data": hexstr(self.sibling)}


def get_proof(commitment: AssetCommitment, address: str) -> List[ProofStep]:
    """
    Sibling path from the asset's leaf up to the root.
    Raises AssetNotFound when `address` is not committed.
    """
    index = commitment.index_of(address)
    proof = []
    for layer in commitment.layers[:-1]:
        is_right = index % 2 == 1
        pair = index - 1 if is_right else index + 1
        # a promoted odd node has no sibling on this layer
        if pair < len(layer):
            proof.append(ProofStep(layer[pair], LEFT if is_right else RIGHT))
        index //= 2
    return proof


def process_proof(leaf: bytes, proof: Sequence[ProofStep]) -> bytes:
    computed = leaf
    for step in proof:
        if step.position == LEFT:
            computed = hash_pair(step.sibling, computed)
        elif step.position == RIGHT:
            computed = hash_pair(computed, step.sibling)
        else:
            raise ValueError(f"unknown proof position: {step.position!r}")
    return computed


def verify(root: Union[bytes, str], leaf_address: str, leaf_amount: int, proof: Sequence[ProofStep]) -> bool:
    try:
        leaf = taker_asset_leaf(leaf_address, leaf_amount)
        return process_proof(leaf, proof) == to_b32(root)
    except (InvalidAddress, InvalidAmount, ValueError, TypeError):
        return False


# ---------- wire form ----------
# The settlement contract receives bytes32[] plus a uint256 mask where
# bit i set means the sibling of step i sits on the left.

def proof_hashes(proof: Sequence[ProofStep]) -> List[str]:
    return [hexstr(step.sibling) for step in proof]


def position_mask(proof: Sequence[ProofStep]) -> int:
    mask = 0
    for i, step in enumerate(proof):
        if step.position == LEFT:
            mask |= 1 << i
    return mask


def unpack_proof(hashes: Sequence[Union[bytes, str]], mask: int) -> List[ProofStep]:
    if isinstance(mask, bool) or not isinstance(mask, int) or mask < 0 or mask >> len(hashes):
        raise ValueError(f"position mask {mask!r} does not fit a {len(hashes)}-step proof")
    return [
        ProofStep(to_b32(h), LEFT if mask >> i & 1 else RIGHT)
        for i, h in enumerate(hashes)
    ]


def verify_packed(
    root: Union[bytes, str],
    leaf_address: str,
    leaf_amount: int,
    hashes: Sequence[Union[bytes, str]],
    mask: int,
) -> bool:
    """verify() over the wire form submitted with a fill."""
    try:
        proof = unpack_proof(hashes, mask)
    except (ValueError, TypeError):
        return False
    return verify(root, leaf_address, leaf_amount, proof)
