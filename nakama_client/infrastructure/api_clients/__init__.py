"""
API客户端模块

提供基于 REST 网关的 Nakama 客户端实现
"""
from .base import BaseAPIClient, APIResponse
from .rest_client import NakamaRestApiClient

__all__ = [
    "BaseAPIClient",
    "APIResponse",
    "NakamaRestApiClient",
]
