"""
Typed create/get/list/update/delete access to the resource kinds of an LLM provider, backed by
the Kubernetes API.
"""

import contextlib
import logging

import kubernetes
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from aigateway_console.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    StoreError,
    UnrecognizedResourceError,
)
from aigateway_console.llm.constants import API_VERSION_V1, KIND_SECRET
from aigateway_console.resources.entities import parse_resource

_logger = logging.getLogger(__name__)


@contextlib.contextmanager
def _translate_api_errors(kind, action, namespace, name=None):
    """
    Converts a Kubernetes ``ApiException`` raised within the block into the matching
    ``ConsoleException`` subclass, tagged with the resource kind. Transport failures such as
    timeouts or refused connections become a ``StoreError``.
    """
    target = f"{namespace}/{name}" if name else namespace
    try:
        yield
    except ApiException as e:
        if e.status == 404:
            raise NotFoundError(f"{kind} '{target}' not found", kind=kind) from e
        if e.status == 409:
            raise AlreadyExistsError(
                f"{kind} '{target}' already exists", kind=kind, name=name
            ) from e
        raise StoreError(
            f"Failed to {action} {kind} '{target}': {e.status} {e.reason}", kind=kind
        ) from e
    except HTTPError as e:
        raise StoreError(f"Failed to {action} {kind} '{target}': {e}", kind=kind) from e


def _parse_items(parse, kind, namespace, items):
    """
    Parses listed objects one by one, skipping those that do not conform to ``kind``.
    """
    resources = []
    for item in items:
        try:
            resources.append(parse(item))
        except UnrecognizedResourceError as e:
            _logger.warning("Skipping malformed %s in namespace %s: %s", kind, namespace, e.message)
    return resources


class ResourceClient:
    """
    Client for one namespaced custom resource kind, addressed by its API group, version and
    plural name.
    """

    def __init__(self, api, kind, group, version, plural, request_timeout=None):
        self._api = api
        self.kind = kind
        self.group = group
        self.version = version
        self.plural = plural
        self._request_timeout = request_timeout

    @property
    def api_version(self):
        return f"{self.group}/{self.version}"

    def _parse(self, obj):
        obj.setdefault("kind", self.kind)
        return parse_resource(obj)

    def _body(self, resource):
        body = resource.to_dict()
        body["apiVersion"] = self.api_version
        return body

    def create(self, resource):
        meta = resource.metadata
        _logger.debug("Creating %s %s/%s", self.kind, meta.namespace, meta.name)
        with _translate_api_errors(self.kind, "create", meta.namespace, meta.name):
            created = self._api.create_namespaced_custom_object(
                self.group,
                self.version,
                meta.namespace,
                self.plural,
                self._body(resource),
                _request_timeout=self._request_timeout,
            )
        return self._parse(created)

    def get(self, namespace, name):
        with _translate_api_errors(self.kind, "get", namespace, name):
            obj = self._api.get_namespaced_custom_object(
                self.group,
                self.version,
                namespace,
                self.plural,
                name,
                _request_timeout=self._request_timeout,
            )
        return self._parse(obj)

    def list(self, namespace):
        with _translate_api_errors(self.kind, "list", namespace):
            response = self._api.list_namespaced_custom_object(
                self.group,
                self.version,
                namespace,
                self.plural,
                _request_timeout=self._request_timeout,
            )
        return _parse_items(self._parse, self.kind, namespace, response.get("items", []))

    def update(self, resource):
        meta = resource.metadata
        _logger.debug("Updating %s %s/%s", self.kind, meta.namespace, meta.name)
        with _translate_api_errors(self.kind, "update", meta.namespace, meta.name):
            updated = self._api.replace_namespaced_custom_object(
                self.group,
                self.version,
                meta.namespace,
                self.plural,
                meta.name,
                self._body(resource),
                _request_timeout=self._request_timeout,
            )
        return self._parse(updated)

    def delete(self, namespace, name):
        _logger.debug("Deleting %s %s/%s", self.kind, namespace, name)
        with _translate_api_errors(self.kind, "delete", namespace, name):
            self._api.delete_namespaced_custom_object(
                self.group,
                self.version,
                namespace,
                self.plural,
                name,
                _request_timeout=self._request_timeout,
            )


class SecretClient:
    """
    Client for core ``v1`` Secrets with the same surface as :py:class:`ResourceClient`.
    """

    kind = KIND_SECRET
    api_version = API_VERSION_V1

    def __init__(self, core_api, api_client=None, request_timeout=None):
        self._api = core_api
        self._api_client = api_client or kubernetes.client.ApiClient()
        self._request_timeout = request_timeout

    def _parse(self, secret):
        obj = self._api_client.sanitize_for_serialization(secret)
        obj.setdefault("kind", self.kind)
        obj.setdefault("apiVersion", self.api_version)
        return parse_resource(obj)

    def _body(self, resource):
        body = resource.to_dict()
        body["apiVersion"] = self.api_version
        return body

    def create(self, resource):
        meta = resource.metadata
        _logger.debug("Creating %s %s/%s", self.kind, meta.namespace, meta.name)
        with _translate_api_errors(self.kind, "create", meta.namespace, meta.name):
            created = self._api.create_namespaced_secret(
                meta.namespace, self._body(resource), _request_timeout=self._request_timeout
            )
        return self._parse(created)

    def get(self, namespace, name):
        with _translate_api_errors(self.kind, "get", namespace, name):
            secret = self._api.read_namespaced_secret(
                name, namespace, _request_timeout=self._request_timeout
            )
        return self._parse(secret)

    def list(self, namespace):
        with _translate_api_errors(self.kind, "list", namespace):
            response = self._api.list_namespaced_secret(
                namespace, _request_timeout=self._request_timeout
            )
        return _parse_items(self._parse, self.kind, namespace, response.items)

    def update(self, resource):
        meta = resource.metadata
        _logger.debug("Updating %s %s/%s", self.kind, meta.namespace, meta.name)
        with _translate_api_errors(self.kind, "update", meta.namespace, meta.name):
            updated = self._api.replace_namespaced_secret(
                meta.name,
                meta.namespace,
                self._body(resource),
                _request_timeout=self._request_timeout,
            )
        return self._parse(updated)

    def delete(self, namespace, name):
        _logger.debug("Deleting %s %s/%s", self.kind, namespace, name)
        with _translate_api_errors(self.kind, "delete", namespace, name):
            self._api.delete_namespaced_secret(
                name, namespace, _request_timeout=self._request_timeout
            )
