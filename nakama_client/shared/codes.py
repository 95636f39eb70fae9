"""
Client error codes carried by NakamaClientError.code.

Network, status and JSON decoding errors keep the httpx / grpc / json
types and have no code here.
"""
from enum import IntEnum


class ErrorCode(IntEnum):
    """客户端错误码定义（单一来源）"""

    # 配置错误 (1xxxx)
    CONFIGURATION_ERROR = 10000
    PARAM_MISSING = 10001
    UNSUPPORTED_TRANSPORT = 10002

    # 认证错误 (3xxxx)
    AUTHENTICATION_FAILED = 30002

    # 响应错误 (4xxxx)
    EMPTY_RESPONSE = 40004


__all__ = ["ErrorCode"]
