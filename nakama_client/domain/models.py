"""Account, user and storage data transfer objects.

These mirror the server's JSON schema field for field (snake_case names).
Both transports decode into the same models; unknown fields are ignored.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .permissions import StorageReadPermission, StorageWritePermission


class DTOBase(BaseModel):
    """Immutable wire model."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class AccountDevice(DTOBase):
    id: Optional[str] = None
    vars: dict[str, str] = Field(default_factory=dict)

    @field_validator("vars", mode="before")
    @classmethod
    def _null_vars(cls, v: Any) -> Any:
        return {} if v is None else v


class User(DTOBase):
    id: Optional[str] = None
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    lang_tag: Optional[str] = None
    location: Optional[str] = None
    timezone: Optional[str] = None
    metadata: Optional[str] = None
    facebook_id: Optional[str] = None
    google_id: Optional[str] = None
    gamecenter_id: Optional[str] = None
    steam_id: Optional[str] = None
    online: bool = False
    edge_count: int = 0
    create_time: Optional[datetime] = None
    update_time: Optional[datetime] = None
    facebook_instant_game_id: Optional[str] = None
    apple_id: Optional[str] = None


class Account(DTOBase):
    user: Optional[User] = None
    wallet: Optional[str] = None
    email: Optional[str] = None
    devices: list[AccountDevice] = Field(default_factory=list)
    custom_id: Optional[str] = None
    verify_time: Optional[datetime] = None
    disable_time: Optional[datetime] = None

    @field_validator("devices", mode="before")
    @classmethod
    def _null_devices(cls, v: Any) -> Any:
        return [] if v is None else v


class Users(DTOBase):
    users: list[User] = Field(default_factory=list)

    @field_validator("users", mode="before")
    @classmethod
    def _null_users(cls, v: Any) -> Any:
        return [] if v is None else v


class StorageObject(DTOBase):
    collection: Optional[str] = None
    key: Optional[str] = None
    user_id: Optional[str] = None
    value: Optional[str] = None
    version: Optional[str] = None
    permission_read: StorageReadPermission = StorageReadPermission.NO_READ
    permission_write: StorageWritePermission = StorageWritePermission.NO_WRITE
    create_time: Optional[datetime] = None
    update_time: Optional[datetime] = None

    @field_validator("permission_read", mode="before")
    @classmethod
    def _decode_read(cls, v: Any) -> Any:
        if v is None:
            return StorageReadPermission.NO_READ
        if isinstance(v, (int, str)) and str(v).isdigit():
            return StorageReadPermission.from_wire(int(v))
        return v

    @field_validator("permission_write", mode="before")
    @classmethod
    def _decode_write(cls, v: Any) -> Any:
        if v is None:
            return StorageWritePermission.NO_WRITE
        if isinstance(v, (int, str)) and str(v).isdigit():
            return StorageWritePermission.from_wire(int(v))
        return v


class StorageObjectAck(DTOBase):
    collection: Optional[str] = None
    key: Optional[str] = None
    user_id: Optional[str] = None
    version: Optional[str] = None


class StorageObjectAcks(DTOBase):
    acks: list[StorageObjectAck] = Field(default_factory=list)

    @field_validator("acks", mode="before")
    @classmethod
    def _null_acks(cls, v: Any) -> Any:
        return [] if v is None else v


class StorageObjects(DTOBase):
    objects: list[StorageObject] = Field(default_factory=list)

    @field_validator("objects", mode="before")
    @classmethod
    def _null_objects(cls, v: Any) -> Any:
        return [] if v is None else v


class StorageObjectList(StorageObjects):
    """One page of a storage listing; ``cursor`` is None on the last page."""

    cursor: Optional[str] = None

    @field_validator("cursor", mode="before")
    @classmethod
    def _empty_cursor(cls, v: Any) -> Any:
        return v or None

    @property
    def has_more(self) -> bool:
        return self.cursor is not None


class ReadStorageObjectId(DTOBase):
    collection: Optional[str] = None
    key: Optional[str] = None
    user_id: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class WriteStorageObject(DTOBase):
    collection: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None
    version: Optional[str] = None
    permission_read: Optional[StorageReadPermission] = None
    permission_write: Optional[StorageWritePermission] = None

    def to_wire(self) -> dict[str, Any]:
        """JSON body for the server; permissions encoded as integers."""
        data: dict[str, Any] = self.model_dump(
            exclude_none=True,
            exclude={"permission_read", "permission_write"},
        )
        if self.permission_read is not None:
            data["permission_read"] = self.permission_read.to_wire()
        if self.permission_write is not None:
            data["permission_write"] = self.permission_write.to_wire()
        return data


class Rpc(DTOBase):
    id: Optional[str] = None
    payload: Optional[str] = None
    http_key: Optional[str] = None


__all__ = [
    "AccountDevice",
    "User",
    "Account",
    "Users",
    "StorageObject",
    "StorageObjectAck",
    "StorageObjectAcks",
    "StorageObjects",
    "StorageObjectList",
    "ReadStorageObjectId",
    "WriteStorageObject",
    "Rpc",
]
