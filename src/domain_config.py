# ============================================================================
# PROJECT: Limit Order Protocol Off-Chain Toolkit v1.0
# MODULE: domain_config.py
# PURPOSE: Build explicit EIP-712 domain parameters from the environment.
# ============================================================================

import os

from errors import ConfigError, InvalidAddress, InvalidAmount
from typed_data import DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION, DomainParams


def load_domain_from_env(environ=None) -> DomainParams:
    """
    Reads LOP_DOMAIN_NAME, LOP_DOMAIN_VERSION, LOP_CHAIN_ID and
    LOP_VERIFYING_CONTRACT. Only the verifying contract is required.
    Callers pass the result to the encoder explicitly.
    """
    env = os.environ if environ is None else environ

    verifying_contract = env.get("LOP_VERIFYING_CONTRACT")
    if not verifying_contract:
        raise ConfigError("Set LOP_VERIFYING_CONTRACT to the LimitOrderProtocol address.")

    chain_id_raw = env.get("LOP_CHAIN_ID", "1")
    try:
        chain_id = int(chain_id_raw, 0)
    except ValueError:
        raise ConfigError(f"LOP_CHAIN_ID is not an integer: {chain_id_raw!r}") from None

    try:
        return DomainParams(
            verifyingContract=verifying_contract,
            chainId=chain_id,
            name=env.get("LOP_DOMAIN_NAME", DEFAULT_DOMAIN_NAME),
            version=env.get("LOP_DOMAIN_VERSION", DEFAULT_DOMAIN_VERSION),
        )
    except (InvalidAddress, InvalidAmount) as e:
        raise ConfigError(f"invalid domain parameters: {e}") from e
