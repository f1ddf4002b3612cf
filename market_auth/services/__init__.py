"""
Services - Use cases composed from ports.
"""

from market_auth.services.authenticator import Authenticator
from market_auth.services.query_builder import build_page_meta, build_pagination, build_query, build_sort
from market_auth.services.session_verifier import SessionVerifier, extract_bearer

__all__ = [
    "Authenticator",
    "SessionVerifier",
    "extract_bearer",
    "build_query",
    "build_sort",
    "build_pagination",
    "build_page_meta",
]
