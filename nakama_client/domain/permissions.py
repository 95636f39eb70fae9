"""Storage object permission levels and their wire encoding.

The server stores permissions as integers. The tables below are the
encoding contract; they are kept explicit so reordering the enum members
never changes what goes on the wire.
"""
from __future__ import annotations

from enum import Enum


class StorageReadPermission(str, Enum):
    NO_READ = "no_read"
    OWNER_READ = "owner_read"
    PUBLIC_READ = "public_read"

    def to_wire(self) -> int:
        return READ_PERMISSION_ORDINALS[self]

    @classmethod
    def from_wire(cls, value: int) -> "StorageReadPermission":
        try:
            return _READ_PERMISSION_BY_ORDINAL[int(value)]
        except KeyError:
            raise ValueError(f"Unknown storage read permission: {value}") from None


class StorageWritePermission(str, Enum):
    NO_WRITE = "no_write"
    OWNER_WRITE = "owner_write"

    def to_wire(self) -> int:
        return WRITE_PERMISSION_ORDINALS[self]

    @classmethod
    def from_wire(cls, value: int) -> "StorageWritePermission":
        try:
            return _WRITE_PERMISSION_BY_ORDINAL[int(value)]
        except KeyError:
            raise ValueError(f"Unknown storage write permission: {value}") from None


READ_PERMISSION_ORDINALS: dict[StorageReadPermission, int] = {
    StorageReadPermission.NO_READ: 0,
    StorageReadPermission.OWNER_READ: 1,
    StorageReadPermission.PUBLIC_READ: 2,
}

WRITE_PERMISSION_ORDINALS: dict[StorageWritePermission, int] = {
    StorageWritePermission.NO_WRITE: 0,
    StorageWritePermission.OWNER_WRITE: 1,
}

_READ_PERMISSION_BY_ORDINAL = {v: k for k, v in READ_PERMISSION_ORDINALS.items()}
_WRITE_PERMISSION_BY_ORDINAL = {v: k for k, v in WRITE_PERMISSION_ORDINALS.items()}
