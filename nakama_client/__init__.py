"""Async REST/gRPC client for Nakama-compatible game servers."""
from nakama_client.core.config import Settings, TransportType, settings
from nakama_client.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    EmptyResponseError,
    NakamaClientError,
)
from nakama_client.core.logging_config import configure_logging
from nakama_client.domain import (
    Account,
    AccountDevice,
    NakamaBaseClient,
    ReadStorageObjectId,
    Session,
    StorageObject,
    StorageObjectAck,
    StorageObjectAcks,
    StorageObjectList,
    StorageObjects,
    StorageReadPermission,
    StorageWritePermission,
    User,
    Users,
    WriteStorageObject,
)
from nakama_client.factory import ClientRegistry, default_registry, get_nakama_client, register_transport

__version__ = "0.1.0"

__all__ = [
    "get_nakama_client",
    "ClientRegistry",
    "default_registry",
    "register_transport",
    "NakamaBaseClient",
    "TransportType",
    "Settings",
    "settings",
    "configure_logging",
    "NakamaClientError",
    "ConfigurationError",
    "AuthenticationError",
    "EmptyResponseError",
    "Session",
    "Account",
    "AccountDevice",
    "User",
    "Users",
    "StorageObject",
    "StorageObjectAck",
    "StorageObjectAcks",
    "StorageObjects",
    "StorageObjectList",
    "ReadStorageObjectId",
    "WriteStorageObject",
    "StorageReadPermission",
    "StorageWritePermission",
]
