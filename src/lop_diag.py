# ============================================================================
# PROJECT: Limit Order Protocol Off-Chain Toolkit v1.0
# MODULE: lop_diag.py
# PURPOSE: Diagnostics for integrators: publish the type hash constants,
#          print commitment roots/proofs and order digests.
# ============================================================================

import argparse
import json
import sys

import audit_log
from asset_commitment import AssetCommitment
from domain_config import load_domain_from_env
from errors import OrderCommitmentError
from order_model import MultiAssetOrder, NormalOrder
from order_struct import (
    DOMAIN_STRUCT,
    MULTI_ASSET_ORDER_STRUCT,
    NORMAL_ORDER_STRUCT,
    get_type_hash,
    parse_solidity_struct,
)
from proof_service import get_proof, position_mask, proof_hashes
from sign_core import hexstr
from typed_data import domain_separator, encode, struct_hash, digest

NUMERIC_FIELDS = ("makerAmount", "takerAmount", "expiry")


def _audit(args, entry):
    if args.audit:
        audit_log.append(entry, path=args.audit)


def cmd_typehash(args):
    structs = [DOMAIN_STRUCT, NORMAL_ORDER_STRUCT, MULTI_ASSET_ORDER_STRUCT]
    if args.struct:
        with open(args.struct) as f:
            structs.append(parse_solidity_struct(f.read()))

    for struct in structs:
        type_hash = hexstr(get_type_hash(struct))
        print(f"{struct.name} : {type_hash}")
        print(f"  {struct.signature()}")
        _audit(args, {"event": "type_hash", "struct": struct.name, "type_hash": type_hash})


def _parse_asset(text):
    address, sep, amount = text.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected ADDRESS:AMOUNT, got {text!r}")
    try:
        return address, int(amount, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"amount is not an integer: {amount!r}") from None


def cmd_commit(args):
    commitment = AssetCommitment.build(args.assets)
    print(f"root : {commitment.hex_root()}")
    for asset in commitment.assets:
        steps = get_proof(commitment, asset.address)
        proof = proof_hashes(steps)
        print(f"  {asset.address} {asset.amount} proof={proof} positions={position_mask(steps)}")
        _audit(args, {
            "event": "taker_asset_proof",
            "root": commitment.hex_root(),
            "address": asset.address,
            "amount": str(asset.amount),
            "proof": proof,
            "proofPositions": str(position_mask(steps)),
        })


def load_order(data):
    """Builds an order from its JSON form; amounts may be decimal strings."""
    fields = dict(data)
    for name in NUMERIC_FIELDS:
        if isinstance(fields.get(name), str):
            fields[name] = int(fields[name], 0)

    if "takerAssets" in fields:
        assets = [
            (a["address"], int(a["amount"], 0) if isinstance(a["amount"], str) else a["amount"])
            for a in fields.pop("takerAssets")
        ]
        return MultiAssetOrder.create(fields, assets)
    return NormalOrder.create(fields)


def cmd_digest(args):
    domain = load_domain_from_env()
    with open(args.order_json) as f:
        order = load_order(json.load(f))

    typed = encode(order, domain)
    order_digest = hexstr(digest(typed))
    print(f"domainSeparator : {hexstr(domain_separator(domain))}")
    print(f"structHash      : {hexstr(struct_hash(typed))}")
    print(f"digest          : {order_digest}")
    if args.typed_data:
        print(json.dumps(typed.as_dict(), indent=2))
    _audit(args, {"event": "order_digest", "digest": order_digest, "typed_data": typed.as_dict()})


def build_parser():
    parser = argparse.ArgumentParser(description="Limit order protocol commitment diagnostics")
    parser.add_argument("--audit", metavar="PATH", help="append produced artifacts to a JSONL audit log")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("typehash", help="print the struct type hash constants")
    p.add_argument("--struct", metavar="FILE", help="also hash a Solidity struct declaration")
    p.set_defaults(func=cmd_typehash)

    p = sub.add_parser("commit", help="print the taker-asset commitment root and proofs")
    p.add_argument("assets", nargs="+", type=_parse_asset, metavar="ADDRESS:AMOUNT")
    p.set_defaults(func=cmd_commit)

    p = sub.add_parser("digest", help="print the EIP-712 digest of an order")
    p.add_argument("--order-json", required=True, metavar="FILE")
    p.add_argument("--typed-data", action="store_true", help="also print the eth_signTypedData payload")
    p.set_defaults(func=cmd_digest)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except OrderCommitmentError as e:
        print(f"[FATAL] {type(e).__name__}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
