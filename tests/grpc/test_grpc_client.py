import base64
from typing import Tuple

import grpc
import pytest
from google.protobuf import timestamp_pb2

from nakama_client.core.exceptions import AuthenticationError
from nakama_client.domain.models import ReadStorageObjectId, WriteStorageObject
from nakama_client.domain.permissions import StorageReadPermission, StorageWritePermission
from nakama_client.domain.session import Session
from nakama_client.grpc_app.client import NakamaGrpcClient
from nakama_client.grpc_app.generated import api_pb2, apigrpc_pb2_grpc


pytestmark = pytest.mark.asyncio

BASIC = "Basic " + base64.b64encode(b"defaultkey:").decode()
CREATED_AT = timestamp_pb2.Timestamp(seconds=1700000000)


def _authenticate_handler(method):
    async def handler(self, request, context):
        self._record(method, request, context)
        if not self.issue_tokens:
            return api_pb2.Session()
        return api_pb2.Session(created=request.create.value, token="t1", refresh_token="r1")

    handler.__name__ = method
    return handler


class FakeNakama(apigrpc_pb2_grpc.NakamaServicer):
    """In-memory stand-in for the server; records what each call carried."""

    def __init__(self):
        self.calls = []
        self.issue_tokens = True
        self._store = {}
        self._version = 0

    def _record(self, method, request, context):
        self.calls.append((method, request, dict(context.invocation_metadata())))

    AuthenticateCustom = _authenticate_handler("AuthenticateCustom")
    AuthenticateDevice = _authenticate_handler("AuthenticateDevice")
    AuthenticateEmail = _authenticate_handler("AuthenticateEmail")
    AuthenticateFacebook = _authenticate_handler("AuthenticateFacebook")
    AuthenticateGameCenter = _authenticate_handler("AuthenticateGameCenter")
    AuthenticateGoogle = _authenticate_handler("AuthenticateGoogle")
    AuthenticateSteam = _authenticate_handler("AuthenticateSteam")

    async def GetAccount(self, request, context):
        self._record("GetAccount", request, context)
        return api_pb2.Account(
            user=api_pb2.User(id="u1", username="alice", edge_count=3, create_time=CREATED_AT),
            wallet='{"coins": 10}',
            devices=[api_pb2.AccountDevice(id="d1")],
        )

    async def GetUsers(self, request, context):
        self._record("GetUsers", request, context)
        return api_pb2.Users(users=[api_pb2.User(id=i) for i in request.ids])

    async def WriteStorageObjects(self, request, context):
        self._record("WriteStorageObjects", request, context)
        acks = []
        for obj in request.objects:
            self._version += 1
            self._store[(obj.collection, obj.key)] = (obj, str(self._version))
            acks.append(api_pb2.StorageObjectAck(
                collection=obj.collection, key=obj.key, user_id="u1", version=str(self._version),
            ))
        return api_pb2.StorageObjectAcks(acks=acks)

    async def ReadStorageObjects(self, request, context):
        self._record("ReadStorageObjects", request, context)
        found = []
        for object_id in request.object_ids:
            hit = self._store.get((object_id.collection, object_id.key))
            if hit is None:
                continue
            obj, version = hit
            found.append(api_pb2.StorageObject(
                collection=obj.collection,
                key=obj.key,
                user_id="u1",
                value=obj.value,
                version=version,
                permission_read=obj.permission_read.value,
                permission_write=obj.permission_write.value,
                create_time=CREATED_AT,
                update_time=CREATED_AT,
            ))
        return api_pb2.StorageObjects(objects=found)

    async def ListStorageObjects(self, request, context):
        self._record("ListStorageObjects", request, context)
        return api_pb2.StorageObjectList(
            objects=[api_pb2.StorageObject(collection=request.collection, key="k")],
            cursor="",
        )

    async def RpcFunc(self, request, context):
        self._record("RpcFunc", request, context)
        return api_pb2.Rpc(id=request.id, payload=request.payload.upper())


@pytest.fixture
async def nakama_server() -> Tuple[str, FakeNakama]:
    """In-process, insecure server on an ephemeral port."""
    servicer = FakeNakama()
    server = grpc.aio.server()
    apigrpc_pb2_grpc.add_NakamaServicer_to_server(servicer, server)
    port = server.add_insecure_port("127.0.0.1:0")
    await server.start()
    try:
        yield port, servicer
    finally:
        await server.stop(grace=None)


@pytest.fixture
async def client(nakama_server):
    port, _ = nakama_server
    async with NakamaGrpcClient(host="127.0.0.1", server_key="defaultkey", port=port) as c:
        yield c


@pytest.fixture
def servicer(nakama_server) -> FakeNakama:
    return nakama_server[1]


@pytest.fixture
def session() -> Session:
    return Session(token="user-token")


async def test_authenticate_device_sends_server_key(client, servicer):
    session = await client.authenticate_device("abc", username="alice", variables={"k": "v"})

    assert session == Session(created=True, token="t1", refresh_token="r1")
    method, request, metadata = servicer.calls[-1]
    assert method == "AuthenticateDevice"
    assert request.account.id == "abc"
    assert dict(request.account.vars) == {"k": "v"}
    assert request.HasField("create") and request.create.value is True
    assert request.username == "alice"
    assert metadata["authorization"] == BASIC


async def test_authenticate_create_false_is_explicit(client, servicer):
    await client.authenticate_device("abc", create=False)
    _, request, _ = servicer.calls[-1]
    assert request.HasField("create")
    assert request.create.value is False


@pytest.mark.parametrize(
    "method, args",
    [
        ("authenticate_email", ("a@example.com", "pw")),
        ("authenticate_device", ("abc",)),
        ("authenticate_facebook", ("fb-token",)),
        ("authenticate_google", ("google-token",)),
        ("authenticate_game_center", ("p", "b", 1, "s", "sig", "url")),
        ("authenticate_steam", ("steam-token",)),
        ("authenticate_custom", ("custom-id",)),
    ],
)
async def test_authenticate_without_token_fails(client, servicer, method, args):
    servicer.issue_tokens = False
    with pytest.raises(AuthenticationError):
        await getattr(client, method)(*args)


async def test_unimplemented_method_surfaces_rpc_error():
    # a server with no Nakama service registered
    server = grpc.aio.server()
    port = server.add_insecure_port("127.0.0.1:0")
    await server.start()
    try:
        async with NakamaGrpcClient(host="127.0.0.1", server_key="defaultkey", port=port) as c:
            with pytest.raises(grpc.aio.AioRpcError) as ei:
                await c.authenticate_email("a@example.com", "pw")
    finally:
        await server.stop(grace=None)
    assert ei.value.code() == grpc.StatusCode.UNIMPLEMENTED


async def test_get_account_uses_bearer_token(client, servicer, session):
    account = await client.get_account(session)

    assert account.user.username == "alice"
    assert account.user.edge_count == 3
    assert account.user.create_time.timestamp() == 1700000000
    assert account.wallet == '{"coins": 10}'
    assert [d.id for d in account.devices] == ["d1"]
    assert account.devices[0].vars == {}
    assert servicer.calls[-1][2]["authorization"] == "Bearer user-token"


async def test_get_users(client, servicer, session):
    users = await client.get_users(session, ids=["1", "2"])
    assert [u.id for u in users.users] == ["1", "2"]
    _, request, _ = servicer.calls[-1]
    assert list(request.usernames) == []


async def test_write_then_read_storage_objects(client, session):
    objects = [
        WriteStorageObject(
            collection="saves",
            key=f"slot{i}",
            value='{"level": %d}' % i,
            permission_read=StorageReadPermission.PUBLIC_READ,
            permission_write=StorageWritePermission.OWNER_WRITE,
        )
        for i in range(3)
    ]
    acks = await client.write_storage_objects(session, objects)
    assert len(acks.acks) == 3
    assert [a.key for a in acks.acks] == ["slot0", "slot1", "slot2"]

    result = await client.read_storage_objects(
        session, [ReadStorageObjectId(collection="saves", key="slot1", user_id="u1")]
    )
    (obj,) = result.objects
    assert obj.value == '{"level": 1}'
    assert obj.version == acks.acks[1].version
    assert obj.permission_read is StorageReadPermission.PUBLIC_READ
    assert obj.permission_write is StorageWritePermission.OWNER_WRITE
    assert obj.create_time.timestamp() == 1700000000
    assert obj.create_time.tzinfo is not None


async def test_write_storage_object_without_permissions_leaves_them_unset(client, servicer, session):
    await client.write_storage_object(session, collection="c", key="k", value="{}")
    _, request, _ = servicer.calls[-1]
    (obj,) = request.objects
    assert not obj.HasField("permission_read")
    assert not obj.HasField("permission_write")


async def test_list_storage_objects_last_page(client, servicer, session):
    page = await client.list_storage_objects(session, collection="saves", limit=5)

    assert page.cursor is None
    assert page.has_more is False
    assert page.objects[0].collection == "saves"
    _, request, _ = servicer.calls[-1]
    assert request.limit.value == 5


async def test_call_rpc_sends_bearer_token(client, servicer, session):
    result = await client.call_rpc(session, "shout", "hello")

    assert result == "HELLO"
    method, request, metadata = servicer.calls[-1]
    assert method == "RpcFunc"
    assert request.id == "shout"
    assert metadata["authorization"] == "Bearer user-token"


async def test_close_reopens_lazily(client, session):
    await client.get_account(session)
    await client.close()
    account = await client.get_account(session)
    assert account.user.id == "u1"


async def test_call_rpc_without_payload_sends_empty_field(client, servicer, session):
    result = await client.call_rpc(session, "ping")

    assert result is None
    _, request, _ = servicer.calls[-1]
    assert request.payload == ""
    assert request.http_key == ""
