"""
REST API客户端基类

提供通用的HTTP请求功能，包括：
- 可选重试（默认单次请求）
- 请求/响应日志
- 认证头合并
- 超时控制
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


class HTTPMethod(Enum):
    """HTTP方法枚举"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"


@dataclass
class APIResponse:
    """API响应封装"""
    status_code: int
    headers: Dict[str, str]
    data: Any
    raw_content: bytes
    elapsed_ms: float
    request_id: Optional[str] = None

    @property
    def has_body(self) -> bool:
        """成功响应是否带有可解析的 JSON 正文"""
        return self.data is not None


RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRY_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


class BaseAPIClient:
    """
    REST API客户端基类

    提供通用的HTTP请求功能，子类继承并实现具体的API调用。
    非 2xx 响应以 httpx.HTTPStatusError 原样抛出，网络错误以 httpx.TransportError 原样抛出。
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        max_retries: int = 0,
        retry_delay: float = 0.5,
        headers: Optional[Dict[str, str]] = None,
        verify_ssl: bool = True,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        初始化API客户端

        Args:
            base_url: API基础URL
            timeout: 请求超时时间（秒），None 表示不限制
            max_retries: 最大重试次数，0 表示不重试
            retry_delay: 重试延迟（秒）
            headers: 默认请求头
            verify_ssl: 是否验证SSL证书
            debug: 是否开启调试模式
            transport: 自定义 httpx 传输层（测试时注入 MockTransport）
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay
        self.verify_ssl = verify_ssl
        self.debug = debug
        self._transport = transport

        # 设置默认请求头
        self.default_headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "nakama-client-python/0.1",
        }
        if headers:
            self.default_headers.update(headers)

        self._client: Optional[httpx.AsyncClient] = None

    @property
    async def client(self) -> httpx.AsyncClient:
        """获取或创建HTTP客户端"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                verify=self.verify_ssl,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """关闭HTTP客户端"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _build_url(self, endpoint: str) -> str:
        """构建完整URL"""
        endpoint = endpoint.lstrip('/')
        return f"{self.base_url}/{endpoint}"

    def _log_request(self, method: str, url: str, **kwargs):
        """记录请求日志"""
        if self.debug:
            logger.debug(
                f"API Request: {method} {url}",
                extra={
                    "method": method,
                    "url": url,
                    "params": kwargs.get("params"),
                    "headers": {k: v for k, v in kwargs.get("headers", {}).items()
                                if k.lower() != "authorization"},
                },
            )

    def _log_response(self, method: str, url: str, response: APIResponse):
        """记录响应日志"""
        if self.debug:
            logger.debug(
                f"API Response: {method} {url} -> {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "elapsed_ms": response.elapsed_ms,
                    "request_id": response.request_id,
                },
            )

    async def _request(
        self,
        method: Union[str, HTTPMethod],
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        """
        发送HTTP请求

        Args:
            method: HTTP方法
            endpoint: API端点
            params: 查询参数（值为 None 的项会被丢弃）
            json_data: JSON请求体
            headers: 本次请求的附加请求头（覆盖默认值）

        Returns:
            APIResponse: API响应

        Raises:
            httpx.HTTPStatusError: 非 2xx 响应
            httpx.TransportError: 网络错误
            json.JSONDecodeError: 成功响应的 JSON 正文无法解析
        """
        if isinstance(method, HTTPMethod):
            method = method.value

        url = self._build_url(endpoint)

        request_headers = {**self.default_headers}
        if headers:
            request_headers.update(headers)

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        self._log_request(method, url, params=params, headers=request_headers)

        async def _send_once() -> APIResponse:
            start_time = datetime.now()
            client = await self.client
            response = await client.request(
                method=method,
                url=url,
                params=params or None,
                json=json_data,
                headers=request_headers,
            )
            elapsed = (datetime.now() - start_time).total_seconds() * 1000

            # 仅解析成功响应；畸形 JSON 原样抛出 json.JSONDecodeError
            content_type = response.headers.get("content-type", "")
            response_data = None
            if response.is_success and "application/json" in content_type and response.content:
                response_data = response.json()

            api_response = APIResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                data=response_data,
                raw_content=response.content,
                elapsed_ms=elapsed,
                request_id=response.headers.get("x-request-id"),
            )
            self._log_response(method, url, api_response)

            response.raise_for_status()
            return api_response

        if self.max_retries == 0:
            return await _send_once()

        retrying = AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(
                multiplier=self.retry_delay,
                min=self.retry_delay,
                max=self.retry_delay * 8,
            ),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        async for attempt in retrying:
            with attempt:
                return await _send_once()

    async def get(self, endpoint: str, **kwargs) -> APIResponse:
        """GET请求"""
        return await self._request(HTTPMethod.GET, endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs) -> APIResponse:
        """POST请求"""
        return await self._request(HTTPMethod.POST, endpoint, **kwargs)

    async def put(self, endpoint: str, **kwargs) -> APIResponse:
        """PUT请求"""
        return await self._request(HTTPMethod.PUT, endpoint, **kwargs)
