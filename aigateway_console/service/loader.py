"""
Discovery of a provider's resource graph, starting from its AIServiceBackend and following the
references between resources.
"""

import logging

from aigateway_console.exceptions import ConsoleException, NotFoundError
from aigateway_console.llm.constants import (
    GROUP_AIGATEWAY_ENVOY_PROXY,
    GROUP_GATEWAY_ENVOY_PROXY,
    KIND_AI_SERVICE_BACKEND,
    KIND_BACKEND,
)

_logger = logging.getLogger(__name__)

# An empty group in a target reference means the group of the referencing policy
_BACKEND_GROUPS = ("", GROUP_GATEWAY_ENVOY_PROXY)
_AI_SERVICE_BACKEND_GROUPS = ("", GROUP_AIGATEWAY_ENVOY_PROXY)


def _find_targeting_policy(client, namespace, name, kind, groups):
    """
    Returns the first policy in ``namespace`` with a target reference to ``kind`` ``name``, in
    the order the store lists them.
    """
    try:
        policies = client.list(namespace)
    except ConsoleException as e:
        _logger.warning("Failed to list %s in namespace %s: %s", client.kind, namespace, e.message)
        return None
    for policy in policies:
        if any(ref.matches(name, kind, groups) for ref in policy.spec.target_refs or []):
            return policy
    return None


def _load_credential_secret(client_manager, security_policy, namespace):
    ref = security_policy.spec.credential_secret_ref()
    if ref is None:
        return None
    secret_namespace = ref.namespace or namespace
    try:
        return client_manager.secret.get(secret_namespace, ref.name)
    except ConsoleException as e:
        _logger.debug(
            "Credential secret %s/%s of %s is unavailable: %s",
            secret_namespace,
            ref.name,
            security_policy.metadata.name,
            e.message,
        )
        return None


def load_provider_resources(client_manager, namespace, name, backend_namespace=None):
    """
    Loads every resource belonging to the provider ``name`` in ``namespace``.

    The AIServiceBackend and the Backend it references are required. The BackendTLSPolicy
    targeting the Backend, the BackendSecurityPolicy targeting the AIServiceBackend and the
    Secret referenced by that policy are included when they can be found.

    Args:
        client_manager: A :py:class:`ClientManager <aigateway_console.store.manager.ClientManager>`
            or any object exposing the same per-kind clients.
        namespace: Namespace of the AIServiceBackend.
        name: Name of the AIServiceBackend, which is the provider name.
        backend_namespace: Overrides the namespace in which the Backend is looked up. Defaults to
            the namespace of the backend reference, else ``namespace``.

    Returns:
        The list of resources, root first.

    Raises:
        NotFoundError: If the AIServiceBackend or its Backend does not exist.
    """
    try:
        service_backend = client_manager.ai_service_backend.get(namespace, name)
    except NotFoundError as e:
        raise NotFoundError(
            f"{KIND_AI_SERVICE_BACKEND} '{namespace}/{name}' not found",
            kind=KIND_AI_SERVICE_BACKEND,
        ) from e
    resources = [service_backend]

    backend_ref = service_backend.spec.backend_ref
    backend_namespace = backend_namespace or backend_ref.namespace or namespace
    backend = client_manager.backend.get(backend_namespace, backend_ref.name)
    resources.append(backend)

    tls_policy = _find_targeting_policy(
        client_manager.backend_tls_policy,
        backend_namespace,
        backend.metadata.name,
        KIND_BACKEND,
        _BACKEND_GROUPS,
    )
    if tls_policy is not None:
        resources.append(tls_policy)

    security_policy = _find_targeting_policy(
        client_manager.backend_security_policy,
        namespace,
        service_backend.metadata.name,
        KIND_AI_SERVICE_BACKEND,
        _AI_SERVICE_BACKEND_GROUPS,
    )
    if security_policy is not None:
        resources.append(security_policy)
        secret = _load_credential_secret(client_manager, security_policy, namespace)
        if secret is not None:
            resources.append(secret)

    return resources
