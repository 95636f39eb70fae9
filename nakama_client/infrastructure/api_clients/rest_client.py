"""REST transport: maps client calls onto the server's HTTP/JSON gateway."""
from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence
from urllib.parse import quote

import httpx

from nakama_client.core.config import DEFAULT_HTTP_PORT, ClientOptions, Settings
from nakama_client.core.exceptions import AuthenticationError, EmptyResponseError
from nakama_client.core.logging_config import get_logger
from nakama_client.domain.models import (
    Account,
    ReadStorageObjectId,
    Rpc,
    StorageObjectAcks,
    StorageObjectList,
    StorageObjects,
    Users,
    WriteStorageObject,
)
from nakama_client.domain.permissions import StorageReadPermission, StorageWritePermission
from nakama_client.domain.session import Session
from nakama_client.shared.auth import basic_auth_header

from .base import APIResponse, BaseAPIClient

logger = get_logger(__name__)


def _account_body(variables: Optional[dict[str, str]], **fields: Any) -> dict[str, Any]:
    body = {k: v for k, v in fields.items() if v is not None}
    if variables is not None:
        body["vars"] = dict(variables)
    return body


class NakamaRestApiClient(BaseAPIClient):
    """
    REST transport.

    Unauthenticated calls carry the server key as HTTP Basic credentials.
    Authenticated calls carry the session's bearer token on that request
    only, so one instance can serve any number of sessions concurrently.
    """

    def __init__(
        self,
        host: str,
        server_key: str,
        port: int = DEFAULT_HTTP_PORT,
        ssl: bool = False,
        timeout: Optional[float] = None,
        max_retries: int = 0,
        retry_delay: float = 0.5,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        scheme = "https" if ssl else "http"
        super().__init__(
            base_url=f"{scheme}://{host}:{port}",
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            headers={"Authorization": basic_auth_header(server_key)},
            debug=debug,
            transport=transport,
        )
        self.host = host
        self.port = port
        self.ssl = ssl
        self.server_key = server_key

    # Authentication

    async def _authenticate(
        self,
        provider: str,
        body: dict[str, Any],
        *,
        create: bool,
        username: Optional[str],
    ) -> Session:
        res = await self.post(
            f"/v2/account/authenticate/{provider}",
            params={"create": "true" if create else "false", "username": username},
            json_data=body,
        )
        data = res.data
        if not res.has_body or not isinstance(data, dict) or not data.get("token"):
            logger.warning("authentication_failed", provider=provider, status_code=res.status_code)
            raise AuthenticationError(provider=provider)

        return Session(
            created=bool(data.get("created", False)),
            token=data["token"],
            refresh_token=data.get("refresh_token"),
        )

    async def authenticate_email(
        self,
        email: str,
        password: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        return await self._authenticate(
            "email",
            _account_body(variables, email=email, password=password),
            create=create,
            username=username,
        )

    async def authenticate_device(
        self,
        device_id: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        return await self._authenticate(
            "device",
            _account_body(variables, id=device_id),
            create=create,
            username=username,
        )

    async def authenticate_facebook(
        self,
        token: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        return await self._authenticate(
            "facebook",
            _account_body(variables, token=token),
            create=create,
            username=username,
        )

    async def authenticate_google(
        self,
        token: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        return await self._authenticate(
            "google",
            _account_body(variables, token=token),
            create=create,
            username=username,
        )

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
        # int64 travels as a decimal string in JSON
        return await self._authenticate(
            "gamecenter",
            _account_body(
                variables,
                player_id=player_id,
                bundle_id=bundle_id,
                timestamp_seconds=str(timestamp_seconds),
                salt=salt,
                signature=signature,
                public_key_url=public_key_url,
            ),
            create=create,
            username=username,
        )

    async def authenticate_steam(
        self,
        token: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        return await self._authenticate(
            "steam",
            _account_body(variables, token=token),
            create=create,
            username=username,
        )

    async def authenticate_custom(
        self,
        id: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        return await self._authenticate(
            "custom",
            _account_body(variables, id=id),
            create=create,
            username=username,
        )

    # Authenticated calls

    @staticmethod
    def _session_headers(session: Session) -> dict[str, str]:
        return {"Authorization": session.authorization_header()}

    @staticmethod
    def _body(res: APIResponse, endpoint: str) -> dict[str, Any]:
        if not res.has_body or not isinstance(res.data, dict):
            raise EmptyResponseError(endpoint, res.status_code)
        return res.data

    async def get_account(self, session: Session) -> Account:
        endpoint = "/v2/account"
        res = await self.get(endpoint, headers=self._session_headers(session))
        return Account.model_validate(self._body(res, endpoint))

    async def get_users(
        self,
        session: Session,
        *,
        facebook_ids: Optional[Sequence[str]] = None,
        ids: Optional[Sequence[str]] = None,
        usernames: Optional[Sequence[str]] = None,
    ) -> Users:
        endpoint = "/v2/user"
        res = await self.get(
            endpoint,
            params={
                "ids": list(ids) if ids else None,
                "usernames": list(usernames) if usernames else None,
                "facebook_ids": list(facebook_ids) if facebook_ids else None,
            },
            headers=self._session_headers(session),
        )
        return Users.model_validate(self._body(res, endpoint))

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
        return await self.write_storage_objects(
            session,
            [
                WriteStorageObject(
                    collection=collection,
                    key=key,
                    value=value,
                    version=version,
                    permission_read=read_permission,
                    permission_write=write_permission,
                )
            ],
        )

    async def write_storage_objects(
        self,
        session: Session,
        objects: Sequence[WriteStorageObject],
    ) -> StorageObjectAcks:
        endpoint = "/v2/storage"
        res = await self.put(
            endpoint,
            json_data={"objects": [obj.to_wire() for obj in objects]},
            headers=self._session_headers(session),
        )
        return StorageObjectAcks.model_validate(self._body(res, endpoint))

    async def read_storage_objects(
        self,
        session: Session,
        ids: Iterable[ReadStorageObjectId],
    ) -> StorageObjects:
        endpoint = "/v2/storage"
        res = await self.post(
            endpoint,
            json_data={"object_ids": [object_id.to_wire() for object_id in ids]},
            headers=self._session_headers(session),
        )
        return StorageObjects.model_validate(self._body(res, endpoint))

    async def list_storage_objects(
        self,
        session: Session,
        *,
        collection: Optional[str] = None,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> StorageObjectList:
        if not collection:
            raise ValueError("collection is required to list storage objects over REST")

        endpoint = f"/v2/storage/{quote(collection, safe='')}"
        res = await self.get(
            endpoint,
            params={"user_id": user_id, "limit": limit, "cursor": cursor},
            headers=self._session_headers(session),
        )
        return StorageObjectList.model_validate(self._body(res, endpoint))

    async def call_rpc(
        self,
        session: Session,
        rpc_id: str,
        payload: Optional[str] = None,
        *,
        http_key: Optional[str] = None,
    ) -> Optional[str]:
        endpoint = f"/v2/rpc/{quote(rpc_id, safe='')}"
        # The gateway expects the payload as a JSON-encoded string body
        res = await self.post(
            endpoint,
            params={"http_key": http_key},
            json_data=payload if payload is not None else "",
            headers=self._session_headers(session),
        )
        return Rpc.model_validate(self._body(res, endpoint)).payload


def build_rest_client(options: ClientOptions, cfg: Settings) -> NakamaRestApiClient:
    """Transport builder registered with the client factory."""
    return NakamaRestApiClient(
        host=options.host,
        server_key=options.server_key,
        port=options.port,
        ssl=options.ssl,
        timeout=cfg.http.timeout,
        max_retries=cfg.http.max_retries,
        retry_delay=cfg.http.retry_delay,
        debug=cfg.DEBUG,
    )
