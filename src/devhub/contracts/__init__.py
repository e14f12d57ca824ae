"""
Contracts (Protocols) for DevHub.

These protocols define the interfaces that implementations must satisfy.
Using Protocol enables structural subtyping - no inheritance required.
"""

from .connector import ConnectorProtocol, CredentialField

__all__ = [
    "ConnectorProtocol",
    "CredentialField",
]
