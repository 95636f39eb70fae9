"""
会话值对象 - 认证成功后由服务端签发，后续所有需认证的调用都需传入
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import jwt
from pydantic import BaseModel, ConfigDict, PrivateAttr


class Session(BaseModel):
    """Bearer credentials returned by an authenticate call.

    The access token is a JWT issued by the server. Its claims are read
    without signature verification; the client only uses them for display
    and expiry checks, the server remains the authority.
    """

    model_config = ConfigDict(frozen=True)

    created: bool = False
    token: str
    refresh_token: Optional[str] = None

    _claims: dict[str, Any] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._claims = _decode_claims(self.token)

    @property
    def user_id(self) -> Optional[str]:
        return self._claims.get("uid")

    @property
    def username(self) -> Optional[str]:
        return self._claims.get("usn")

    @property
    def vars(self) -> dict[str, str]:
        return dict(self._claims.get("vrs") or {})

    @property
    def expires_at(self) -> Optional[datetime]:
        exp = self._claims.get("exp")
        if exp is None:
            return None
        return datetime.fromtimestamp(int(exp), tz=timezone.utc)

    @property
    def refresh_expires_at(self) -> Optional[datetime]:
        if not self.refresh_token:
            return None
        exp = _decode_claims(self.refresh_token).get("exp")
        if exp is None:
            return None
        return datetime.fromtimestamp(int(exp), tz=timezone.utc)

    def is_expired(self, at: Optional[datetime] = None) -> bool:
        """True when the access token expiry is known and has passed."""
        expires_at = self.expires_at
        if expires_at is None:
            return False
        now = at or datetime.now(timezone.utc)
        return now >= expires_at

    def authorization_header(self) -> str:
        return f"Bearer {self.token}"


def _decode_claims(token: str) -> dict[str, Any]:
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return {}
    return claims if isinstance(claims, dict) else {}
