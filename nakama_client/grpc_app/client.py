"""gRPC transport: maps client calls onto the ``nakama.api.Nakama`` service."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence

import grpc
from google.protobuf import empty_pb2

from nakama_client.core.config import DEFAULT_GRPC_PORT, ClientOptions, Settings
from nakama_client.core.exceptions import AuthenticationError
from nakama_client.core.logging_config import get_logger
from nakama_client.domain.models import (
    Account,
    ReadStorageObjectId,
    StorageObjectAcks,
    StorageObjectList,
    StorageObjects,
    Users,
    WriteStorageObject,
)
from nakama_client.domain.permissions import StorageReadPermission, StorageWritePermission
from nakama_client.domain.session import Session
from nakama_client.shared.auth import basic_auth_header

from . import mappers
from .generated import api_pb2, apigrpc_pb2_grpc
from .interceptors import LoggingInterceptor

logger = get_logger(__name__)

Metadata = tuple[tuple[str, str], ...]


class NakamaGrpcClient:
    """
    gRPC transport.

    Credentials travel as per-call ``authorization`` metadata: the server key
    (HTTP Basic form) for authenticate calls, the session's bearer token for
    everything else. The channel is opened lazily on the first call.
    """

    def __init__(
        self,
        host: str,
        server_key: str,
        port: int = DEFAULT_GRPC_PORT,
        ssl: bool = False,
        timeout: Optional[float] = None,
        root_certificates: Optional[bytes] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.ssl = ssl
        self.timeout = timeout
        self.server_key = server_key
        self._root_certificates = root_certificates
        self._server_key_metadata: Metadata = (("authorization", basic_auth_header(server_key)),)
        self._channel: Optional[grpc.aio.Channel] = None
        self._stub: Optional[apigrpc_pb2_grpc.NakamaStub] = None

    @property
    def target(self) -> str:
        return f"{self.host}:{self.port}"

    def _open_channel(self) -> grpc.aio.Channel:
        interceptors = [LoggingInterceptor()]
        if self.ssl:
            creds = grpc.ssl_channel_credentials(root_certificates=self._root_certificates)
            return grpc.aio.secure_channel(self.target, creds, interceptors=interceptors)
        return grpc.aio.insecure_channel(self.target, interceptors=interceptors)

    @property
    def raw_grpc_client(self) -> apigrpc_pb2_grpc.NakamaStub:
        """The underlying stub, for calls this client does not wrap."""
        if self._stub is None:
            self._channel = self._open_channel()
            self._stub = apigrpc_pb2_grpc.NakamaStub(self._channel)
            logger.debug("grpc_channel_opened", target=self.target, ssl=self.ssl)
        return self._stub

    async def close(self) -> None:
        if self._channel is not None:
            await self._channel.close()
        self._channel = None
        self._stub = None

    async def __aenter__(self) -> "NakamaGrpcClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @staticmethod
    def _session_metadata(session: Session) -> Metadata:
        return (("authorization", session.authorization_header()),)

    # Authentication

    async def _authenticate(self, method: str, request, *, provider: str) -> Session:
        call = getattr(self.raw_grpc_client, method)
        res = await call(request, metadata=self._server_key_metadata, timeout=self.timeout)
        try:
            return mappers.session_from_proto(res, provider=provider)
        except AuthenticationError:
            logger.warning("authentication_failed", provider=provider)
            raise

    async def authenticate_email(
        self,
        email: str,
        password: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        request = mappers.authenticate_request(
            api_pb2.AuthenticateEmailRequest,
            api_pb2.AccountEmail(email=email, password=password, vars=variables or {}),
            create=create,
            username=username,
        )
        return await self._authenticate("AuthenticateEmail", request, provider="email")

    async def authenticate_device(
        self,
        device_id: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        request = mappers.authenticate_request(
            api_pb2.AuthenticateDeviceRequest,
            api_pb2.AccountDevice(id=device_id, vars=variables or {}),
            create=create,
            username=username,
        )
        return await self._authenticate("AuthenticateDevice", request, provider="device")

    async def authenticate_facebook(
        self,
        token: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        request = mappers.authenticate_request(
            api_pb2.AuthenticateFacebookRequest,
            api_pb2.AccountFacebook(token=token, vars=variables or {}),
            create=create,
            username=username,
        )
        return await self._authenticate("AuthenticateFacebook", request, provider="facebook")

    async def authenticate_google(
        self,
        token: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        request = mappers.authenticate_request(
            api_pb2.AuthenticateGoogleRequest,
            api_pb2.AccountGoogle(token=token, vars=variables or {}),
            create=create,
            username=username,
        )
        return await self._authenticate("AuthenticateGoogle", request, provider="google")

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
        request = mappers.authenticate_request(
            api_pb2.AuthenticateGameCenterRequest,
            api_pb2.AccountGameCenter(
                player_id=player_id,
                bundle_id=bundle_id,
                timestamp_seconds=timestamp_seconds,
                salt=salt,
                signature=signature,
                public_key_url=public_key_url,
                vars=variables or {},
            ),
            create=create,
            username=username,
        )
        return await self._authenticate("AuthenticateGameCenter", request, provider="gamecenter")

    async def authenticate_steam(
        self,
        token: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        request = mappers.authenticate_request(
            api_pb2.AuthenticateSteamRequest,
            api_pb2.AccountSteam(token=token, vars=variables or {}),
            create=create,
            username=username,
        )
        return await self._authenticate("AuthenticateSteam", request, provider="steam")

    async def authenticate_custom(
        self,
        id: str,
        *,
        create: bool = True,
        username: Optional[str] = None,
        variables: Optional[dict[str, str]] = None,
    ) -> Session:
        request = mappers.authenticate_request(
            api_pb2.AuthenticateCustomRequest,
            api_pb2.AccountCustom(id=id, vars=variables or {}),
            create=create,
            username=username,
        )
        return await self._authenticate("AuthenticateCustom", request, provider="custom")

    # Authenticated calls

    async def get_account(self, session: Session) -> Account:
        res = await self.raw_grpc_client.GetAccount(
            empty_pb2.Empty(),
            metadata=self._session_metadata(session),
            timeout=self.timeout,
        )
        return mappers.account_from_proto(res)

    async def get_users(
        self,
        session: Session,
        *,
        facebook_ids: Optional[Sequence[str]] = None,
        ids: Optional[Sequence[str]] = None,
        usernames: Optional[Sequence[str]] = None,
    ) -> Users:
        request = api_pb2.GetUsersRequest(
            ids=list(ids or []),
            usernames=list(usernames or []),
            facebook_ids=list(facebook_ids or []),
        )
        res = await self.raw_grpc_client.GetUsers(
            request,
            metadata=self._session_metadata(session),
            timeout=self.timeout,
        )
        return mappers.users_from_proto(res)

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
        request = api_pb2.WriteStorageObjectsRequest(
            objects=[mappers.write_object_to_proto(obj) for obj in objects],
        )
        res = await self.raw_grpc_client.WriteStorageObjects(
            request,
            metadata=self._session_metadata(session),
            timeout=self.timeout,
        )
        return mappers.acks_from_proto(res)

    async def read_storage_objects(
        self,
        session: Session,
        ids: Iterable[ReadStorageObjectId],
    ) -> StorageObjects:
        request = api_pb2.ReadStorageObjectsRequest(
            object_ids=[mappers.read_object_id_to_proto(object_id) for object_id in ids],
        )
        res = await self.raw_grpc_client.ReadStorageObjects(
            request,
            metadata=self._session_metadata(session),
            timeout=self.timeout,
        )
        return mappers.objects_from_proto(res)

    async def list_storage_objects(
        self,
        session: Session,
        *,
        collection: Optional[str] = None,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> StorageObjectList:
        request = mappers.list_request(
            collection=collection,
            cursor=cursor,
            limit=limit,
            user_id=user_id,
        )
        res = await self.raw_grpc_client.ListStorageObjects(
            request,
            metadata=self._session_metadata(session),
            timeout=self.timeout,
        )
        return mappers.object_list_from_proto(res)

    async def call_rpc(
        self,
        session: Session,
        rpc_id: str,
        payload: Optional[str] = None,
        *,
        http_key: Optional[str] = None,
    ) -> Optional[str]:
        request = api_pb2.Rpc(id=rpc_id, payload=payload or "", http_key=http_key or "")
        res = await self.raw_grpc_client.RpcFunc(
            request,
            metadata=self._session_metadata(session),
            timeout=self.timeout,
        )
        return mappers.rpc_from_proto(res).payload


def build_grpc_client(options: ClientOptions, cfg: Settings) -> NakamaGrpcClient:
    """Transport builder registered with the client factory."""
    root_certificates = None
    if options.ssl and cfg.grpc.tls.ca:
        root_certificates = Path(cfg.grpc.tls.ca).read_bytes()
    return NakamaGrpcClient(
        host=options.host,
        server_key=options.server_key,
        port=options.port,
        ssl=options.ssl,
        timeout=cfg.grpc.timeout,
        root_certificates=root_certificates,
    )
