"""客户端异常定义。

只覆盖客户端自身能判定的错误：配置缺失与认证响应不可用。
网络与服务端状态错误由底层库（httpx / grpc）原样抛出。
"""
from __future__ import annotations

from typing import Optional

from nakama_client.shared.codes import ErrorCode


class NakamaClientError(Exception):
    """客户端异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "ClientError",
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"Details: {self.details}")
        return " | ".join(parts)


class ConfigurationError(NakamaClientError):
    """Missing or invalid construction parameters."""

    def __init__(
        self,
        message: str,
        *,
        code: int = ErrorCode.CONFIGURATION_ERROR,
        details: Optional[dict] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            error_type="ConfigurationError",
            details=details,
        )


class AuthenticationError(NakamaClientError):
    """The server replied without a usable session."""

    def __init__(self, message: str = "Authentication failed.", *, provider: Optional[str] = None):
        details = {"provider": provider} if provider else None
        super().__init__(
            code=ErrorCode.AUTHENTICATION_FAILED,
            message=message,
            error_type="AuthenticationFailed",
            details=details,
        )


class EmptyResponseError(NakamaClientError):
    """A successful reply carried no JSON object body."""

    def __init__(self, endpoint: str, status_code: int):
        super().__init__(
            code=ErrorCode.EMPTY_RESPONSE,
            message=f"Empty response body from {endpoint}.",
            error_type="EmptyResponse",
            details={"endpoint": endpoint, "status_code": status_code},
        )


__all__ = [
    "NakamaClientError",
    "ConfigurationError",
    "AuthenticationError",
    "EmptyResponseError",
]
