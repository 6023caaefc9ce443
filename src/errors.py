"""Errors raised while building order commitments, digests and proofs.

Every error is raised synchronously by the call that detected it. None of
them is retried: all operations are deterministic, so the same input
raises the same error again.
"""


class OrderCommitmentError(Exception):
    """Base class for every error raised by this project."""


class InvalidStructDefinition(OrderCommitmentError):
    """A struct declaration has no fields or a field without type and name."""


class InvalidAmount(OrderCommitmentError):
    """An amount is negative, non-integral or outside the uint256 range."""


class EmptyAssetSet(InvalidAmount):
    """A multi-asset commitment was requested over zero taker assets."""


class InvalidAddress(OrderCommitmentError):
    """A value is not a 20-byte hex account identifier."""


class DuplicateAsset(OrderCommitmentError):
    """Two taker assets normalize to the same address."""

    def __init__(self, address: str):
        super().__init__(f"Multiple taker assets for the same token: {address}")
        self.address = address


class AssetNotFound(OrderCommitmentError):
    """A proof was requested for an address outside the commitment."""

    def __init__(self, address: str):
        super().__init__(f"No such taker asset in the order: {address}")
        self.address = address


class InvalidSignature(OrderCommitmentError):
    """A signature blob cannot be split into (v, r, s)."""


class ConfigError(OrderCommitmentError):
    """Domain parameters could not be loaded from the environment."""
