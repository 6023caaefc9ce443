import dataclasses
import json

import pytest
from coincurve import PrivateKey, PublicKey
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_hash.auto import keccak

from errors import InvalidAddress
from order_model import MultiAssetOrder, NormalOrder
from order_struct import MULTI_ASSET_ORDER_TYPEHASH, NORMAL_ORDER_TYPEHASH
from sign_core import split_signature, u256
from typed_data import (
    DomainParams,
    digest,
    domain_separator,
    encode,
    encode_value,
    order_digest,
    struct_hash,
)

MAKER = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"
TOKEN_A = "0x1111111111111111111111111111111111111111"
TOKEN_B = "0x2222222222222222222222222222222222222222"
TOKEN_C = "0x3333333333333333333333333333333333333333"
EXPIRY = 1_700_000_000

DOMAIN = DomainParams(verifyingContract="0x5FbDB2315678afecb367f032d93F642f64180aa3", chainId=31337)

# recorded vectors for DOMAIN and the orders below
DOMAIN_SEPARATOR_HEX = "20eb50d469de5c14d06b54b8c836d586a952a6fd49864a5a9b9a2133ab125732"
NORMAL_STRUCT_HASH_HEX = "d6553a13713a81a41559a8cd1f1400f342f144fc77f1106afc6c8e24ef3d060e"
NORMAL_DIGEST_HEX = "9637e918da6e7e26018ecc1fb512ae051e60503ff9249a1292550f55135611ad"
MULTI_DIGEST_HEX = "687cac7a04e5b1bd099098019499cec6a02ac9c3a8444ae36548048fbef3fe84"


def normal_order(**overrides):
    fields = {
        "maker": MAKER,
        "makerToken": TOKEN_A,
        "takerToken": TOKEN_B,
        "makerAmount": 3600 * 10**18,
        "takerAmount": 2 * 10**18,
        "expiry": EXPIRY,
    }
    fields.update(overrides)
    return NormalOrder.create(fields)


def multi_order(assets=((TOKEN_B, 720), (TOKEN_A, 2)), **overrides):
    fields = {"maker": MAKER, "makerToken": TOKEN_C, "makerAmount": 1000, "expiry": EXPIRY}
    fields.update(overrides)
    return MultiAssetOrder.create(fields, assets)


def eth_account_digest(typed):
    full = typed.as_dict()
    full["message"] = dict(typed.message)
    signable = encode_typed_data(full_message=full)
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


def test_domain_separator_vector():
    assert domain_separator(DOMAIN).hex() == DOMAIN_SEPARATOR_HEX
    assert DOMAIN.verifyingContract == "0x5fbdb2315678afecb367f032d93f642f64180aa3"


def test_normal_order_digest_vector():
    typed = encode(normal_order(), DOMAIN)
    assert struct_hash(typed).hex() == NORMAL_STRUCT_HASH_HEX
    assert digest(typed).hex() == NORMAL_DIGEST_HEX


def test_multi_asset_order_digest_vector():
    assert order_digest(multi_order(), DOMAIN).hex() == MULTI_DIGEST_HEX


def test_struct_hash_starts_with_type_hash():
    order = normal_order()
    words = NORMAL_ORDER_TYPEHASH + b"".join(
        encode_value(f.type, getattr(order, f.name)) for f in order.STRUCT.fields
    )
    assert struct_hash(encode(order, DOMAIN)) == keccak(words)
    assert MULTI_ASSET_ORDER_TYPEHASH != NORMAL_ORDER_TYPEHASH


@pytest.mark.parametrize("order_factory", [normal_order, multi_order])
def test_digest_matches_eth_account(order_factory):
    typed = encode(order_factory(), DOMAIN)
    assert digest(typed) == eth_account_digest(typed)


def test_digest_is_deterministic():
    assert order_digest(normal_order(), DOMAIN) == order_digest(normal_order(), DOMAIN)
    assert order_digest(multi_order(), DOMAIN) == order_digest(multi_order(assets=[(TOKEN_A, 2), (TOKEN_B, 720)]), DOMAIN)


@pytest.mark.parametrize("field,value", [
    ("maker", TOKEN_C),
    ("taker", TOKEN_C),
    ("makerToken", TOKEN_C),
    ("takerToken", TOKEN_C),
    ("makerAmount", 1),
    ("takerAmount", 1),
    ("expiry", EXPIRY + 1),
])
def test_any_normal_field_changes_digest(field, value):
    assert order_digest(normal_order(**{field: value}), DOMAIN) != order_digest(normal_order(), DOMAIN)


def test_taker_asset_set_changes_digest():
    base = order_digest(multi_order(), DOMAIN)
    assert order_digest(multi_order(assets=[(TOKEN_B, 721), (TOKEN_A, 2)]), DOMAIN) != base
    assert order_digest(multi_order(assets=[(TOKEN_A, 2)]), DOMAIN) != base
    assert order_digest(multi_order(expiry=EXPIRY + 1), DOMAIN) != base


@pytest.mark.parametrize("change", [
    {"chainId": 1},
    {"name": "OtherProtocol"},
    {"version": "2"},
    {"verifyingContract": TOKEN_A},
])
def test_domain_binds_digest(change):
    other = dataclasses.replace(DOMAIN, **change)
    assert order_digest(normal_order(), other) != order_digest(normal_order(), DOMAIN)


def test_domain_rejects_bad_contract():
    with pytest.raises(InvalidAddress):
        DomainParams(verifyingContract="0x1234")


def test_typed_data_payload_is_json_ready():
    typed = encode(multi_order(), DOMAIN)
    payload = json.loads(json.dumps(typed.as_dict()))
    assert payload["primaryType"] == "MultiAssetOrder"
    assert payload["domain"] == {
        "name": "LimitOrderProtocol",
        "version": "1",
        "chainId": 31337,
        "verifyingContract": DOMAIN.verifyingContract,
    }
    assert payload["message"]["takerAssetMixHash"] == "0x" + typed.message["takerAssetMixHash"].hex()
    assert [f["name"] for f in payload["types"]["EIP712Domain"]] == ["name", "version", "chainId", "verifyingContract"]
    assert list(typed.types) == ["MultiAssetOrder"]


def test_encode_value_hashes_dynamic_types():
    assert encode_value("string", "abc") == keccak(b"abc")
    assert encode_value("bytes", b"\x01\x02") == keccak(b"\x01\x02")
    assert encode_value("bytes", "0x0102") == keccak(b"\x01\x02")
    assert encode_value("bool", True) == u256(1)
    with pytest.raises(ValueError):
        encode_value("int128", 1)


def test_signer_recovers_maker_from_digest():
    priv = bytes.fromhex("ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80")
    account = Account.from_key(priv)
    order = normal_order(maker=account.address)
    d = order_digest(order, DOMAIN)

    sig = split_signature(PrivateKey(priv).sign_recoverable(d, hasher=None))
    # what the settlement contract does with ecrecover
    recoverable = sig.r + sig.s + bytes([sig.v - 27])
    pub = PublicKey.from_signature_and_message(recoverable, d, hasher=None).format(compressed=False)
    assert "0x" + keccak(pub[1:])[-20:].hex() == order.maker
