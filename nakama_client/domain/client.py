"""Client protocol shared by the REST and gRPC transports."""
from typing import Iterable, Optional, Protocol, Sequence, runtime_checkable

from .models import (
    Account,
    ReadStorageObjectId,
    StorageObjectAcks,
    StorageObjectList,
    StorageObjects,
    Users,
    WriteStorageObject,
)
from .permissions import StorageReadPermission, StorageWritePermission
from .session import Session


@runtime_checkable
class NakamaBaseClient(Protocol):
    """Core client protocol for duck typing.

    Obtain an instance through ``nakama_client.get_nakama_client`` rather
    than constructing a transport directly.
    """

    async def authenticate_email(
        self,
        email: str,
        password: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        """Authenticate with email and password."""
        ...

    async def authenticate_device(
        self,
        device_id: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        """Authenticate with a device identifier."""
        ...

    async def authenticate_facebook(
        self,
        token: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        """Authenticate with a Facebook access token."""
        ...

    async def authenticate_google(
        self,
        token: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        """Authenticate with a Google ID token."""
        ...

    async def authenticate_game_center(
        self,
        player_id: str,
        bundle_id: str,
        timestamp_seconds: int,
        salt: str,
        signature: str,
        public_key_url: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        """Authenticate with Apple Game Center identity verification data."""
        ...

    async def authenticate_steam(
        self,
        token: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        """Authenticate with a Steam session ticket."""
        ...

    async def authenticate_custom(
        self,
        id: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        """Authenticate with a custom identifier from an external system."""
        ...

    async def get_account(self, session: Session) -> Account:
        """Fetch the account of the session's user."""
        ...

    async def get_users(
        self,
        session: Session,
        *,
        facebook_ids: Optional[Sequence[str]] = None,
        ids: Optional[Sequence[str]] = None,
        usernames: Optional[Sequence[str]] = None,
    ) -> Users:
        """Fetch users by any combination of ids, usernames and Facebook ids."""
        ...

    async def write_storage_object(
        self,
        session: Session,
        *,
        collection: Optional[str] = None,
        key: Optional[str] = None,
        value: Optional[str] = None,
        version: Optional[str] = None,
        write_permission: Optional[StorageWritePermission] = None,
        read_permission: Optional[StorageReadPermission] = None,
    ) -> StorageObjectAcks:
        """Write a single storage object."""
        ...

    async def write_storage_objects(
        self,
        session: Session,
        objects: Sequence[WriteStorageObject],
    ) -> StorageObjectAcks:
        """Write a batch of storage objects."""
        ...

    async def read_storage_objects(
        self,
        session: Session,
        ids: Iterable[ReadStorageObjectId],
    ) -> StorageObjects:
        """Read storage objects by (collection, key, user_id)."""
        ...

    async def list_storage_objects(
        self,
        session: Session,
        *,
        collection: Optional[str] = None,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> StorageObjectList:
        """List one page of storage objects in a collection."""
        ...

    async def call_rpc(
        self,
        session: Session,
        rpc_id: str,
        payload: Optional[str] = None,
        *,
        http_key: Optional[str] = None,
    ) -> Optional[str]:
        """Call a server-side function; payload and result are opaque strings."""
        ...

    async def close(self) -> None:
        """Release the underlying connection."""
        ...
