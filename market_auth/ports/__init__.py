"""
Ports - Interfaces for credential storage, tokens, revocation and authorization.

Hexagonal architecture: These define WHAT we need, not HOW.
Adapters provide the HOW.
"""

from market_auth.ports.credential_port import CredentialStorePort
from market_auth.ports.document_port import DocumentStorePort
from market_auth.ports.password_port import PasswordHasherPort
from market_auth.ports.revocation_port import RevocationPort
from market_auth.ports.token_port import TokenPort
from market_auth.ports.policy_port import AccessPolicyPort, Requirement, Gate, PolicyDecision, Decision

__all__ = [
    # Identity & storage
    "CredentialStorePort",
    "DocumentStorePort",
    "PasswordHasherPort",
    # Sessions
    "TokenPort",
    "RevocationPort",
    # Authorization
    "AccessPolicyPort",
    "Requirement",
    "Gate",
    "PolicyDecision",
    "Decision",
]
