"""Transport-independent client model: session, DTOs and the client protocol."""
from .client import NakamaBaseClient
from .models import (
    Account,
    AccountDevice,
    ReadStorageObjectId,
    Rpc,
    StorageObject,
    StorageObjectAck,
    StorageObjectAcks,
    StorageObjectList,
    StorageObjects,
    User,
    Users,
    WriteStorageObject,
)
from .permissions import StorageReadPermission, StorageWritePermission
from .session import Session

__all__ = [
    "NakamaBaseClient",
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
    "Rpc",
    "StorageReadPermission",
    "StorageWritePermission",
]
