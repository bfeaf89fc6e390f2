"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .payment_protocols import (
    ChainExecutorProtocol,
    ProverProtocol,
    RecipientResolverProtocol,
    SaltFactory,
    SecretFactory,
)

__all__ = [
    "ChainExecutorProtocol",
    "ProverProtocol",
    "RecipientResolverProtocol",
    "SaltFactory",
    "SecretFactory",
]
