# ============================================================================
# PROJECT: Limit Order Protocol Off-Chain Toolkit v1.0
# MODULE: fill_request.py
# PURPOSE: Package a signed order into the payload the settlement contract
#          consumes at fill time.
# ============================================================================

from typing import Any, Dict, Union

from errors import AssetNotFound, InvalidAmount
from order_model import MultiAssetOrder, NormalOrder
from proof_service import position_mask, proof_hashes, verify
from sign_core import Signature, hexstr, normalize_address, split_signature, u256

SignatureLike = Union[Signature, bytes, str]


def _signature(sig: SignatureLike) -> Signature:
    if isinstance(sig, Signature):
        return sig
    return split_signature(sig)


def _fill_amount(fill_amount: int) -> int:
    if isinstance(fill_amount, bool) or not isinstance(fill_amount, int) or fill_amount == 0:
        raise InvalidAmount(f"fill amount must be a positive integer, got {fill_amount!r}")
    u256(fill_amount)
    return fill_amount


def order_payload(order: Union[NormalOrder, MultiAssetOrder]) -> Dict[str, Any]:
    # uint256 as decimal strings, bytes32 as hex (same as the signed message)
    out = {}
    for name, value in order.message().items():
        if isinstance(value, bytes):
            out[name] = hexstr(value)
        elif isinstance(value, int):
            out[name] = str(value)
        else:
            out[name] = value
    return out


def build_normal_fill(order: NormalOrder, signature: SignatureLike, fill_amount: int) -> Dict[str, Any]:
    """Payload for fillNormalOrder(order, signature, fillAmount)."""
    fill_amount = _fill_amount(fill_amount)
    if fill_amount > order.takerAmount:
        raise InvalidAmount(f"fill amount {fill_amount} exceeds takerAmount {order.takerAmount}")

    return {
        "order": order_payload(order),
        "signature": _signature(signature).as_dict(),
        "fillAmount": str(fill_amount),
    }


def build_multi_asset_fill(
    order: MultiAssetOrder,
    signature: SignatureLike,
    fill_token: str,
    fill_amount: int,
) -> Dict[str, Any]:
    """
    Payload for a multi-asset fill: the chosen token, its committed amount
    and the Merkle proof linking them to the signed takerAssetMixHash.
    `proofPositions` is the left-sibling bit mask for `proof`.
    The proof is checked locally before the payload is returned.
    """
    fill_token = normalize_address(fill_token)
    fill_amount = _fill_amount(fill_amount)
    order_amount = order.taker_asset_amount(fill_token)
    if fill_amount > order_amount:
        raise InvalidAmount(f"fill amount {fill_amount} exceeds committed amount {order_amount}")

    proof = order.get_taker_asset_proof(fill_token)
    if not verify(order.takerAssetMixHash, fill_token, order_amount, proof):
        # commitment and signed root disagree; the contract would reject it too
        raise AssetNotFound(fill_token)

    return {
        "order": order_payload(order),
        "signature": _signature(signature).as_dict(),
        "fillToken": fill_token,
        "fillAmount": str(fill_amount),
        "fillTokenOrderAmount": str(order_amount),
        "proof": proof_hashes(proof),
        "proofPositions": str(position_mask(proof)),
    }
