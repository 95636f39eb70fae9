from concurrent.futures import ThreadPoolExecutor

import pytest

from nakama_client import get_nakama_client
from nakama_client.core.config import TransportType
from nakama_client.core.exceptions import ConfigurationError
from nakama_client.domain.client import NakamaBaseClient
from nakama_client.factory import ClientRegistry
from nakama_client.grpc_app.client import NakamaGrpcClient
from nakama_client.infrastructure.api_clients.rest_client import NakamaRestApiClient
from nakama_client.shared.codes import ErrorCode


@pytest.fixture
def registry(empty_settings) -> ClientRegistry:
    return ClientRegistry(settings=empty_settings)


def test_same_key_returns_same_instance(registry):
    first = registry.get_or_create("game-a", host="127.0.0.1", server_key="defaultkey")
    second = registry.get_or_create("game-a", host="other.host", server_key="otherkey", port=1, ssl=True)
    third = registry.get_or_create("game-a")

    assert first is second is third
    assert first.host == "127.0.0.1"


def test_different_keys_get_different_instances(registry):
    a = registry.get_or_create("game-a", host="127.0.0.1", server_key="k")
    b = registry.get_or_create("game-b", host="127.0.0.1", server_key="k")
    assert a is not b
    assert len(registry) == 2


@pytest.mark.parametrize(
    "kwargs, missing",
    [
        ({"server_key": "defaultkey"}, ["host"]),
        ({"host": "127.0.0.1"}, ["server_key"]),
        ({}, ["host", "server_key"]),
    ],
)
def test_first_call_without_host_or_key_fails(registry, kwargs, missing):
    with pytest.raises(ConfigurationError) as ei:
        registry.get_or_create("game-a", **kwargs)

    assert ei.value.code == ErrorCode.PARAM_MISSING
    assert ei.value.details["missing"] == missing
    assert "game-a" not in registry
    assert len(registry) == 0


def test_settings_supply_host_and_key(server_settings):
    registry = ClientRegistry(settings=server_settings)
    client = registry.get_or_create()
    assert client.host == "nakama.example.com"
    assert client.server_key == "envkey"


def test_transport_selects_implementation_and_default_port(registry):
    rest = registry.get_or_create("rest", host="h", server_key="k")
    grpc_client = registry.get_or_create("grpc", host="h", server_key="k", transport="grpc")

    assert isinstance(rest, NakamaRestApiClient)
    assert rest.port == 7350
    assert rest.base_url == "http://h:7350"
    assert isinstance(grpc_client, NakamaGrpcClient)
    assert grpc_client.port == 7349
    assert isinstance(rest, NakamaBaseClient)
    assert isinstance(grpc_client, NakamaBaseClient)


def test_ssl_switches_scheme(registry):
    client = registry.get_or_create(host="h", server_key="k", ssl=True, port=443)
    assert client.base_url == "https://h:443"


def test_unknown_transport_is_a_configuration_error(registry):
    with pytest.raises(ConfigurationError) as ei:
        registry.get_or_create(host="h", server_key="k", transport="carrier-pigeon")
    assert ei.value.code == ErrorCode.UNSUPPORTED_TRANSPORT
    assert len(registry) == 0


def test_concurrent_first_calls_build_one_instance(registry):
    def _get(_):
        return registry.get_or_create("shared", host="127.0.0.1", server_key="k")

    with ThreadPoolExecutor(max_workers=16) as pool:
        clients = list(pool.map(_get, range(64)))

    assert len({id(c) for c in clients}) == 1
    assert len(registry) == 1


async def test_aclose_clears_registry(registry):
    registry.get_or_create("a", host="h", server_key="k")
    registry.get_or_create("b", host="h", server_key="k", transport=TransportType.GRPC)

    await registry.aclose()

    assert len(registry) == 0
    with pytest.raises(ConfigurationError):
        registry.get_or_create("a")


def test_get_nakama_client_picks_port_per_transport(registry):
    rest = get_nakama_client(
        host="h", server_key="k", key="rest", http_port=8350, grpc_port=8349, registry=registry
    )
    grpc_client = get_nakama_client(
        host="h", server_key="k", key="grpc", http_port=8350, grpc_port=8349,
        transport="grpc", registry=registry,
    )
    assert rest.port == 8350
    assert grpc_client.port == 8349


def test_registered_key_ignores_later_arguments(registry):
    first = get_nakama_client(host="h", server_key="k", key="game-g", registry=registry)

    again = get_nakama_client(key="game-g", transport="carrier-pigeon", grpc_port=1, registry=registry)
    assert again is first
    assert registry.get_or_create("game-g", transport="carrier-pigeon") is first
