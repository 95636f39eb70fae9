"""
配置文件 - 客户端配置管理
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_HTTP_PORT = 7350
DEFAULT_GRPC_PORT = 7349


class TransportType(str, Enum):
    """Client transport types."""
    REST = "rest"
    GRPC = "grpc"


class ServerSettings(BaseModel):
    host: Optional[str] = None
    server_key: Optional[str] = None
    ssl: bool = False
    transport: TransportType = TransportType.REST


class HttpSettings(BaseModel):
    port: int = DEFAULT_HTTP_PORT
    # None disables the timeout; requests wait for the server
    timeout: Optional[float] = None
    # 0 means a single attempt
    max_retries: int = 0
    retry_delay: float = 0.5


class GrpcTlsSettings(BaseModel):
    # PEM root certificates; system roots are used when unset
    ca: Optional[str] = None


class GrpcSettings(BaseModel):
    port: int = DEFAULT_GRPC_PORT
    timeout: Optional[float] = None
    tls: GrpcTlsSettings = Field(default_factory=GrpcTlsSettings)


class Settings(BaseSettings):
    """客户端配置"""

    PROJECT_NAME: str = "nakama-client"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    # 导入时自动配置日志（库默认不接管 root logger）
    LOG_AUTOCONFIGURE: bool = False

    # 分组配置：服务端/HTTP/gRPC 采用嵌套模型
    server: ServerSettings = Field(default_factory=ServerSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    grpc: GrpcSettings = Field(default_factory=GrpcSettings)

    model_config = SettingsConfigDict(
        env_prefix="NAKAMA_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    @field_validator("server", mode="after")
    @classmethod
    def _strip_host(cls, v: ServerSettings) -> ServerSettings:
        """去掉误写的协议前缀与尾部斜杠，host 只保留主机名。"""
        if v.host:
            host = v.host.strip()
            for scheme in ("http://", "https://"):
                if host.startswith(scheme):
                    host = host[len(scheme):]
            v.host = host.rstrip("/") or None
        return v

    def default_port(self, transport: TransportType) -> int:
        if transport == TransportType.GRPC:
            return self.grpc.port
        return self.http.port


class ClientOptions(BaseModel):
    """Resolved construction parameters handed to a transport builder."""
    host: str
    server_key: str
    port: int
    ssl: bool = False
    transport: TransportType = TransportType.REST


settings = Settings()
