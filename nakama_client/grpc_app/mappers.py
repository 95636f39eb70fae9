from __future__ import annotations

from typing import Any, Optional

from google.protobuf import json_format, wrappers_pb2
from google.protobuf.message import Message

from nakama_client.core.exceptions import AuthenticationError
from nakama_client.domain import models
from nakama_client.domain.session import Session

from .generated import api_pb2


def message_to_dict(msg: Message) -> dict[str, Any]:
    # Timestamps come out as RFC 3339 strings, which the models parse
    return json_format.MessageToDict(msg, preserving_proto_field_name=True)


def session_from_proto(msg: Any, *, provider: str) -> Session:
    if msg is None or not msg.token:
        raise AuthenticationError(provider=provider)
    return Session(
        created=bool(msg.created),
        token=msg.token,
        refresh_token=msg.refresh_token or None,
    )


def authenticate_request(
    request_cls: Any,
    account: Message,
    *,
    create: bool,
    username: Optional[str],
) -> Message:
    request = request_cls(account=account, create=wrappers_pb2.BoolValue(value=create))
    if username is not None:
        request.username = username
    return request


def write_object_to_proto(obj: models.WriteStorageObject) -> Message:
    msg = api_pb2.WriteStorageObject(
        collection=obj.collection or "",
        key=obj.key or "",
        value=obj.value or "",
        version=obj.version or "",
    )
    if obj.permission_read is not None:
        msg.permission_read.CopyFrom(wrappers_pb2.Int32Value(value=obj.permission_read.to_wire()))
    if obj.permission_write is not None:
        msg.permission_write.CopyFrom(wrappers_pb2.Int32Value(value=obj.permission_write.to_wire()))
    return msg


def read_object_id_to_proto(object_id: models.ReadStorageObjectId) -> Message:
    return api_pb2.ReadStorageObjectId(
        collection=object_id.collection or "",
        key=object_id.key or "",
        user_id=object_id.user_id or "",
    )


def list_request(
    *,
    collection: Optional[str],
    cursor: Optional[str],
    limit: Optional[int],
    user_id: Optional[str],
) -> Message:
    request = api_pb2.ListStorageObjectsRequest(
        collection=collection or "",
        cursor=cursor or "",
        user_id=user_id or "",
    )
    if limit is not None:
        request.limit.CopyFrom(wrappers_pb2.Int32Value(value=limit))
    return request


def account_from_proto(msg: Message) -> models.Account:
    return models.Account.model_validate(message_to_dict(msg))


def users_from_proto(msg: Message) -> models.Users:
    return models.Users.model_validate(message_to_dict(msg))


def acks_from_proto(msg: Message) -> models.StorageObjectAcks:
    return models.StorageObjectAcks.model_validate(message_to_dict(msg))


def objects_from_proto(msg: Message) -> models.StorageObjects:
    return models.StorageObjects.model_validate(message_to_dict(msg))


def object_list_from_proto(msg: Message) -> models.StorageObjectList:
    return models.StorageObjectList.model_validate(message_to_dict(msg))


def rpc_from_proto(msg: Message) -> models.Rpc:
    return models.Rpc.model_validate(message_to_dict(msg))
