from unittest import mock

import kubernetes
import pytest
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import MaxRetryError, ReadTimeoutError

from aigateway_console.exceptions import AlreadyExistsError, NotFoundError, StoreError
from aigateway_console.resources.entities import (
    AIServiceBackend,
    Backend,
    BackendTLSPolicy,
    ObjectMeta,
    Secret,
)
from aigateway_console.store.client import ResourceClient, SecretClient


@pytest.fixture
def custom_api():
    return mock.MagicMock()


@pytest.fixture
def backend_client(custom_api):
    return ResourceClient(
        custom_api, "Backend", "gateway.envoyproxy.io", "v1alpha1", "backends", request_timeout=7
    )


@pytest.fixture
def core_api():
    return mock.MagicMock()


@pytest.fixture
def secret_client(core_api):
    return SecretClient(core_api, kubernetes.client.ApiClient(), request_timeout=7)


def _backend(name="openai-1", namespace="default"):
    return Backend(metadata=ObjectMeta(name=name, namespace=namespace))


def test_create_sends_body_and_parses_response(custom_api, backend_client):
    custom_api.create_namespaced_custom_object.side_effect = lambda *args, **kwargs: args[4]

    created = backend_client.create(_backend())

    args, kwargs = custom_api.create_namespaced_custom_object.call_args
    assert args[:4] == ("gateway.envoyproxy.io", "v1alpha1", "default", "backends")
    assert args[4]["kind"] == "Backend"
    assert args[4]["metadata"] == {"name": "openai-1", "namespace": "default"}
    assert kwargs == {"_request_timeout": 7}
    assert isinstance(created, Backend)


def test_create_stamps_api_version_from_coordinates(custom_api):
    client = ResourceClient(
        custom_api,
        "BackendTLSPolicy",
        "gateway.networking.k8s.io",
        "v1alpha3",
        "backendtlspolicies",
    )
    custom_api.create_namespaced_custom_object.side_effect = lambda *args, **kwargs: args[4]

    created = client.create(BackendTLSPolicy(metadata=ObjectMeta(name="p", namespace="ns")))

    body = custom_api.create_namespaced_custom_object.call_args[0][4]
    assert body["apiVersion"] == "gateway.networking.k8s.io/v1alpha3"
    assert created.api_version == "gateway.networking.k8s.io/v1alpha3"


def test_get_parses_object(custom_api, backend_client):
    custom_api.get_namespaced_custom_object.return_value = _backend().to_dict()

    backend = backend_client.get("default", "openai-1")

    custom_api.get_namespaced_custom_object.assert_called_once_with(
        "gateway.envoyproxy.io",
        "v1alpha1",
        "default",
        "backends",
        "openai-1",
        _request_timeout=7,
    )
    assert backend.metadata.name == "openai-1"


def test_list_fills_in_missing_kind(custom_api):
    client = ResourceClient(
        custom_api, "AIServiceBackend", "aigateway.envoyproxy.io", "v1alpha1", "aiservicebackends"
    )
    custom_api.list_namespaced_custom_object.return_value = {
        "items": [{"metadata": {"name": "a", "namespace": "default"}}, {"metadata": {"name": "b"}}]
    }

    items = client.list("default")

    assert [item.metadata.name for item in items] == ["a", "b"]
    assert all(isinstance(item, AIServiceBackend) for item in items)


def test_update_and_delete(custom_api, backend_client):
    custom_api.replace_namespaced_custom_object.side_effect = lambda *args, **kwargs: args[5]

    backend_client.update(_backend())
    backend_client.delete("default", "openai-1")

    assert custom_api.replace_namespaced_custom_object.call_args[0][4] == "openai-1"
    custom_api.delete_namespaced_custom_object.assert_called_once_with(
        "gateway.envoyproxy.io",
        "v1alpha1",
        "default",
        "backends",
        "openai-1",
        _request_timeout=7,
    )


def test_not_found_is_translated(custom_api, backend_client):
    custom_api.get_namespaced_custom_object.side_effect = ApiException(
        status=404, reason="Not Found"
    )

    with pytest.raises(NotFoundError, match="Backend 'default/missing' not found") as exc_info:
        backend_client.get("default", "missing")
    assert exc_info.value.kind == "Backend"
    assert isinstance(exc_info.value.__cause__, ApiException)


def test_conflict_is_translated(custom_api, backend_client):
    custom_api.create_namespaced_custom_object.side_effect = ApiException(
        status=409, reason="Conflict"
    )

    with pytest.raises(AlreadyExistsError, match="already exists") as exc_info:
        backend_client.create(_backend())
    assert exc_info.value.kind == "Backend"
    assert exc_info.value.name == "openai-1"
    assert exc_info.value.get_http_status_code() == 409


def test_other_api_errors_become_store_errors(custom_api, backend_client):
    custom_api.list_namespaced_custom_object.side_effect = ApiException(
        status=403, reason="Forbidden"
    )

    with pytest.raises(StoreError, match="Failed to list Backend 'default': 403 Forbidden") as e:
        backend_client.list("default")
    assert e.value.kind == "Backend"
    assert e.value.get_http_status_code() == 500


def test_secret_client_round_trip(core_api, secret_client):
    core_api.read_namespaced_secret.return_value = kubernetes.client.V1Secret(
        metadata=kubernetes.client.V1ObjectMeta(name="openai-1", namespace="default"),
        data={"apiKey": "c2stYWJj"},
        type="Opaque",
    )

    secret = secret_client.get("default", "openai-1")

    core_api.read_namespaced_secret.assert_called_once_with(
        "openai-1", "default", _request_timeout=7
    )
    assert isinstance(secret, Secret)
    assert secret.metadata.name == "openai-1"
    assert secret.get_value("apiKey") == "sk-abc"


def test_secret_client_create_and_list(core_api, secret_client):
    core_api.create_namespaced_secret.side_effect = lambda namespace, body, **kwargs: body
    core_api.list_namespaced_secret.return_value = kubernetes.client.V1SecretList(
        items=[
            kubernetes.client.V1Secret(
                metadata=kubernetes.client.V1ObjectMeta(name="s1", namespace="default")
            )
        ]
    )
    secret = Secret(
        metadata=ObjectMeta(name="openai-1", namespace="default"), string_data={"apiKey": "k"}
    )

    created = secret_client.create(secret)
    listed = secret_client.list("default")

    namespace, body = core_api.create_namespaced_secret.call_args[0]
    assert namespace == "default"
    assert body["stringData"] == {"apiKey": "k"}
    assert body["apiVersion"] == "v1"
    assert created.get_value("apiKey") == "k"
    assert [s.metadata.name for s in listed] == ["s1"]


def test_secret_client_delete_not_found(core_api, secret_client):
    core_api.delete_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(NotFoundError, match="Secret 'default/gone' not found"):
        secret_client.delete("default", "gone")


def test_transport_errors_become_store_errors(custom_api, backend_client):
    custom_api.get_namespaced_custom_object.side_effect = ReadTimeoutError(None, None, "timed out")

    with pytest.raises(StoreError, match="Failed to get Backend 'default/openai-1'") as e:
        backend_client.get("default", "openai-1")
    assert e.value.kind == "Backend"
    assert isinstance(e.value.__cause__, ReadTimeoutError)


def test_secret_client_transport_errors_become_store_errors(core_api, secret_client):
    core_api.list_namespaced_secret.side_effect = MaxRetryError(None, "/api/v1", "refused")

    with pytest.raises(StoreError, match="Failed to list Secret 'default'") as e:
        secret_client.list("default")
    assert e.value.kind == "Secret"


def test_list_skips_malformed_items(custom_api):
    client = ResourceClient(
        custom_api, "AIServiceBackend", "aigateway.envoyproxy.io", "v1alpha1", "aiservicebackends"
    )
    custom_api.list_namespaced_custom_object.return_value = {
        "items": [
            {"metadata": {"name": "a", "namespace": "default"}},
            {"metadata": {"name": "b", "namespace": "default"}, "spec": {"backendRef": "nope"}},
        ]
    }

    with mock.patch("aigateway_console.store.client._logger.warning") as mock_warning:
        items = client.list("default")

    assert [item.metadata.name for item in items] == ["a"]
    mock_warning.assert_called_once()
    assert mock_warning.call_args[0][1:3] == ("AIServiceBackend", "default")
