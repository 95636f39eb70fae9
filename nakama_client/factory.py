"""Client factory: transport builders and the per-application client registry."""
from __future__ import annotations

import importlib
import threading
from typing import Callable, Optional, Union

from nakama_client.core.config import ClientOptions, Settings, TransportType, settings as default_settings
from nakama_client.core.exceptions import ConfigurationError
from nakama_client.core.logging_config import get_logger
from nakama_client.domain.client import NakamaBaseClient
from nakama_client.shared.codes import ErrorCode

logger = get_logger(__name__)

DEFAULT_APP_KEY = "default"

# Transport builder type
TransportBuilder = Callable[[ClientOptions, Settings], NakamaBaseClient]

# Global registry for transport builders
_transport_registry: dict[TransportType, TransportBuilder] = {}


def register_transport(transport: TransportType, builder: TransportBuilder) -> None:
    """Register a transport builder.

    Args:
        transport: Transport type
        builder: Function that builds a client instance
    """
    _transport_registry[transport] = builder
    logger.debug("transport_registered", transport=transport.value)


def _auto_register_transports() -> None:
    """Auto-register built-in transports."""
    builtins = [
        (TransportType.REST, "nakama_client.infrastructure.api_clients.rest_client", "build_rest_client"),
        (TransportType.GRPC, "nakama_client.grpc_app.client", "build_grpc_client"),
    ]
    for transport, module_path, builder_name in builtins:
        if transport in _transport_registry:
            continue
        try:
            module = importlib.import_module(module_path)
            register_transport(transport, getattr(module, builder_name))
        except (ImportError, AttributeError) as e:
            logger.debug("transport_unavailable", transport=transport.value, error=str(e))


def resolve_transport(transport: Optional[Union[TransportType, str]], cfg: Settings) -> TransportType:
    try:
        return TransportType(transport or cfg.server.transport)
    except ValueError as exc:
        raise ConfigurationError(
            f"Unsupported transport: {transport}",
            code=ErrorCode.UNSUPPORTED_TRANSPORT,
            details={"available": [t.value for t in TransportType]},
        ) from exc


def create_client(options: ClientOptions, cfg: Optional[Settings] = None) -> NakamaBaseClient:
    """Build a new client for the requested transport (never cached).

    Raises:
        ConfigurationError: If the transport is not registered
    """
    if options.transport not in _transport_registry:
        _auto_register_transports()

        if options.transport not in _transport_registry:
            raise ConfigurationError(
                f"Transport '{options.transport.value}' not registered. "
                f"Available: {[t.value for t in _transport_registry]}",
                code=ErrorCode.UNSUPPORTED_TRANSPORT,
            )

    builder = _transport_registry[options.transport]
    return builder(options, cfg or default_settings)


class ClientRegistry:
    """
    One client per application key.

    The first call for a key must resolve a host and a server key, from the
    arguments or the settings; later calls return the same instance and
    ignore their arguments. Get-or-create is serialised by a lock so
    concurrent first calls build exactly one client.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or default_settings
        self._clients: dict[str, NakamaBaseClient] = {}
        self._lock = threading.Lock()

    def get_or_create(
        self,
        key: str = DEFAULT_APP_KEY,
        *,
        host: Optional[str] = None,
        server_key: Optional[str] = None,
        port: Optional[int] = None,
        ssl: Optional[bool] = None,
        transport: Optional[Union[TransportType, str]] = None,
    ) -> NakamaBaseClient:
        with self._lock:
            client = self._clients.get(key)
            if client is not None:
                return client

            cfg = self.settings
            host = host or cfg.server.host
            server_key = server_key or cfg.server.server_key
            if not host or not server_key:
                missing = [name for name, value in (("host", host), ("server_key", server_key)) if not value]
                raise ConfigurationError(
                    "Not yet initialized, need parameters [host] and [server_key] to initialize.",
                    code=ErrorCode.PARAM_MISSING,
                    details={"key": key, "missing": missing},
                )

            resolved = resolve_transport(transport, cfg)
            options = ClientOptions(
                host=host,
                server_key=server_key,
                port=port or cfg.default_port(resolved),
                ssl=cfg.server.ssl if ssl is None else ssl,
                transport=resolved,
            )
            client = create_client(options, cfg)
            self._clients[key] = client
            logger.info(
                "client_created",
                key=key,
                transport=resolved.value,
                host=options.host,
                port=options.port,
                ssl=options.ssl,
            )
            return client

    def get(self, key: str = DEFAULT_APP_KEY) -> Optional[NakamaBaseClient]:
        with self._lock:
            return self._clients.get(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._clients

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def clear(self) -> None:
        """Forget every instance without closing it."""
        with self._lock:
            self._clients.clear()

    async def aclose(self) -> None:
        """Close every client and clear the registry."""
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            await client.close()


default_registry = ClientRegistry()


def get_nakama_client(
    host: Optional[str] = None,
    server_key: Optional[str] = None,
    key: str = DEFAULT_APP_KEY,
    http_port: Optional[int] = None,
    grpc_port: Optional[int] = None,
    ssl: Optional[bool] = None,
    transport: Optional[Union[TransportType, str]] = None,
    registry: Optional[ClientRegistry] = None,
) -> NakamaBaseClient:
    """Return the client for ``key``, creating it on first use.

    ``http_port`` applies to the REST transport and ``grpc_port`` to gRPC.
    Once ``key`` is registered every argument is ignored.
    """
    registry = registry or default_registry
    client = registry.get(key)
    if client is not None:
        return client

    resolved = resolve_transport(transport, registry.settings)
    port = grpc_port if resolved == TransportType.GRPC else http_port
    return registry.get_or_create(
        key,
        host=host,
        server_key=server_key,
        port=port,
        ssl=ssl,
        transport=resolved,
    )
