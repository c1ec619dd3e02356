"""Shared pytest fixtures for staydesk tests."""
import sys
sys.dont_write_bytecode = True

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from helpers import (  # noqa: E402
    ALL_PERMISSIONS,
    _create_jwks,
    _create_token,
    _generate_rsa_keypair,
)


@pytest.fixture(autouse=True)
def _reset_oidc_jwks_cache():
    """Reset global JWKS cache to avoid cross-test contamination.

    The JWKS cache is a module-level global that persists between tests.
    Without this reset, a cached JWKS from a previous test may not match the
    current test's keys.
    """
    import staydesk.api.auth as auth_module

    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0
    yield
    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0


@pytest.fixture(scope="session")
def rsa_keypair():
    return _generate_rsa_keypair()


@pytest.fixture(scope="session")
def jwks(rsa_keypair):
    _, public_key = rsa_keypair
    return _create_jwks(public_key)


@pytest.fixture
def oidc_env():
    return {
        "OIDC_ISSUER": "https://auth.example.com",
        "OIDC_AUDIENCE": "staydesk-api",
        "OIDC_JWKS_URL": "https://auth.example.com/.well-known/jwks.json",
    }


@pytest.fixture
def client(oidc_env, jwks):
    """TestClient with OIDC configured and JWKS fetch mocked."""
    from staydesk.api.factory import create_app

    with patch("staydesk.api.auth._fetch_jwks", return_value=jwks):
        with patch.dict("os.environ", oidc_env):
            yield TestClient(create_app())


@pytest.fixture
def auth_headers(rsa_keypair):
    """Build Authorization headers for a token with the given permissions."""
    private_key, _ = rsa_keypair

    def _headers(permissions=ALL_PERMISSIONS, **claims) -> dict:
        token = _create_token(private_key, permissions=permissions, **claims)
        return {"Authorization": f"Bearer {token}"}

    return _headers
