"""Pytest bootstrap configuration.

Strip client settings from the environment before anything reads them, so
tests never pick up a developer's server address or key.
"""
import os

for _name in [k for k in os.environ if k.upper().startswith("NAKAMA_")]:
    os.environ.pop(_name, None)

import time
from typing import Any, Optional

import jwt
import pytest

from nakama_client.core.config import ServerSettings, Settings


def make_token(
    user_id: str = "user-1",
    username: str = "alice",
    expires_in: int = 3600,
    variables: Optional[dict[str, str]] = None,
) -> str:
    """Signed like a server token; the client never checks the signature."""
    claims: dict[str, Any] = {
        "uid": user_id,
        "usn": username,
        "exp": int(time.time()) + expires_in,
    }
    if variables:
        claims["vrs"] = variables
    return jwt.encode(claims, "server-secret", algorithm="HS256")


@pytest.fixture
def empty_settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def server_settings() -> Settings:
    return Settings(
        _env_file=None,
        server=ServerSettings(host="nakama.example.com", server_key="envkey"),
    )


@pytest.fixture
def token_factory():
    return make_token
