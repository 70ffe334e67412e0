import json
import os
from pathlib import Path

from aigateway_console.exceptions import AlreadyExistsError, NotFoundError
from aigateway_console.llm.constants import (
    KIND_AI_SERVICE_BACKEND,
    KIND_BACKEND,
    KIND_BACKEND_SECURITY_POLICY,
    KIND_BACKEND_TLS_POLICY,
    KIND_SECRET,
)
from aigateway_console.llm.provider import LLMProvider

RESOURCES_DIR = Path(os.path.dirname(__file__), "resources")


def load_provider_fixture(name) -> LLMProvider:
    with open(RESOURCES_DIR / "providers" / f"{name}.json") as f:
        return LLMProvider.model_validate(json.load(f))


class FakeResourceClient:
    """
    In-memory stand-in for a per-kind resource client. Every call is recorded on the owning
    ``FakeClientManager`` as ``(action, kind, namespace, name)``.
    """

    def __init__(self, manager, kind):
        self._manager = manager
        self.kind = kind
        self.objects = {}

    def _record(self, action, namespace, name=None):
        self._manager.calls.append((action, self.kind, namespace, name))
        if error := self._manager.failures.get((action, self.kind)):
            raise error

    def create(self, resource):
        meta = resource.metadata
        self._record("create", meta.namespace, meta.name)
        key = (meta.namespace, meta.name)
        if key in self.objects:
            raise AlreadyExistsError(
                f"{self.kind} '{meta.namespace}/{meta.name}' already exists",
                kind=self.kind,
                name=meta.name,
            )
        self.objects[key] = resource.model_copy(deep=True)
        return self.objects[key]

    def get(self, namespace, name):
        self._record("get", namespace, name)
        try:
            return self.objects[(namespace, name)].model_copy(deep=True)
        except KeyError:
            raise NotFoundError(f"{self.kind} '{namespace}/{name}' not found", kind=self.kind)

    def list(self, namespace):
        self._record("list", namespace)
        return [
            resource.model_copy(deep=True)
            for (resource_namespace, _), resource in self.objects.items()
            if resource_namespace == namespace
        ]

    def update(self, resource):
        meta = resource.metadata
        self._record("update", meta.namespace, meta.name)
        if (meta.namespace, meta.name) not in self.objects:
            raise NotFoundError(f"{self.kind} '{meta.namespace}/{meta.name}' not found")
        self.objects[(meta.namespace, meta.name)] = resource.model_copy(deep=True)
        return resource

    def delete(self, namespace, name):
        self._record("delete", namespace, name)
        if self.objects.pop((namespace, name), None) is None:
            raise NotFoundError(f"{self.kind} '{namespace}/{name}' not found", kind=self.kind)


class FakeClientManager:
    """
    In-memory stand-in for ``ClientManager`` that records the order of store calls.

    Set ``failures[(action, kind)]`` to an exception to make that call fail.
    """

    def __init__(self):
        self.calls = []
        self.failures = {}
        self.health_error = None
        self.backend = FakeResourceClient(self, KIND_BACKEND)
        self.backend_tls_policy = FakeResourceClient(self, KIND_BACKEND_TLS_POLICY)
        self.backend_security_policy = FakeResourceClient(self, KIND_BACKEND_SECURITY_POLICY)
        self.ai_service_backend = FakeResourceClient(self, KIND_AI_SERVICE_BACKEND)
        self.secret = FakeResourceClient(self, KIND_SECRET)

    def client_for(self, kind):
        return {
            client.kind: client
            for client in (
                self.backend,
                self.backend_tls_policy,
                self.backend_security_policy,
                self.ai_service_backend,
                self.secret,
            )
        }[kind]

    def add(self, *resources):
        for resource in resources:
            meta = resource.metadata
            self.client_for(resource.kind).objects[(meta.namespace, meta.name)] = resource

    def calls_for(self, action):
        return [
            (kind, namespace, name) for act, kind, namespace, name in self.calls if act == action
        ]

    def health_check(self, timeout=None):
        self.calls.append(("health_check", None, None, timeout))
        if self.health_error is not None:
            raise self.health_error
