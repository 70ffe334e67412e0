import logging

from aigateway_console.environment_variables import AIGW_CONSOLE_DEFAULT_NAMESPACE
from aigateway_console.exceptions import (
    AlreadyExistsError,
    ConsoleException,
    NotFoundError,
    StoreError,
    ValidationError,
)
from aigateway_console.llm.constants import (
    KIND_AI_SERVICE_BACKEND,
    KIND_BACKEND,
    KIND_BACKEND_SECURITY_POLICY,
    KIND_BACKEND_TLS_POLICY,
    KIND_SECRET,
)
from aigateway_console.llm.masking import mask_secret
from aigateway_console.llm.provider import LLMProvider
from aigateway_console.llm.translate import to_envoy_gateway_resources, to_llm_provider
from aigateway_console.resources.entities import ResourceGraph
from aigateway_console.service.loader import load_provider_resources

_logger = logging.getLogger(__name__)


class LLMProviderService:
    """
    Implements the LLM provider use cases on top of the per-kind resource clients. Every
    provider returned by this service has its credentials masked.
    """

    def __init__(self, client_manager):
        self._clients = client_manager

    def _client_for(self, kind):
        return {
            KIND_BACKEND: self._clients.backend,
            KIND_BACKEND_TLS_POLICY: self._clients.backend_tls_policy,
            KIND_BACKEND_SECURITY_POLICY: self._clients.backend_security_policy,
            KIND_AI_SERVICE_BACKEND: self._clients.ai_service_backend,
            KIND_SECRET: self._clients.secret,
        }[kind]

    def load_provider_resources(self, namespace, name):
        return load_provider_resources(self._clients, namespace, name)

    def list_providers(self, namespace) -> list[LLMProvider]:
        """
        Lists the providers in ``namespace``. Providers whose resources cannot be loaded or
        translated are skipped.
        """
        providers = []
        for service_backend in self._clients.ai_service_backend.list(namespace):
            name = service_backend.metadata.name
            try:
                resources = self.load_provider_resources(namespace, name)
                provider = to_llm_provider(resources)
            except ConsoleException as e:
                _logger.warning("Skipping provider %s/%s: %s", namespace, name, e.message)
                continue
            providers.append(mask_secret(provider))
        return providers

    def get_provider(self, namespace, name) -> LLMProvider:
        resources = self.load_provider_resources(namespace, name)
        return mask_secret(to_llm_provider(resources))

    def _ensure_absent(self, namespace, name):
        try:
            self._clients.ai_service_backend.get(namespace, name)
        except NotFoundError:
            return
        raise AlreadyExistsError(
            f"{KIND_AI_SERVICE_BACKEND} '{namespace}/{name}' already exists. "
            "Delete the existing provider or choose a different name.",
            kind=KIND_AI_SERVICE_BACKEND,
            name=name,
        )

    def create_provider(self, provider: LLMProvider) -> LLMProvider:
        """
        Creates the Kubernetes resources of ``provider``.

        Resources are created in dependency order. If a creation fails, the resources created
        before it are left in place.

        Returns:
            The created provider with its namespace defaulted and credentials masked.

        Raises:
            ValidationError: If the name is missing or the credentials are incomplete.
            AlreadyExistsError: If the provider, or any of its resources, already exists.
            StoreError: If the store rejects a resource for any other reason.
        """
        if not provider.name:
            raise ValidationError("Provider name is required", field="name")
        if not provider.namespace:
            provider = provider.model_copy(
                update={"namespace": AIGW_CONSOLE_DEFAULT_NAMESPACE.get()}
            )
        namespace, name = provider.namespace, provider.name

        self._ensure_absent(namespace, name)
        resources = to_envoy_gateway_resources(provider)

        for resource in resources:
            try:
                self._client_for(resource.kind).create(resource)
            except AlreadyExistsError as e:
                raise AlreadyExistsError(
                    f"{resource.kind} '{namespace}/{resource.metadata.name}' already exists. "
                    f"Delete the existing {resource.kind} or choose a different provider name.",
                    kind=resource.kind,
                    name=resource.metadata.name,
                ) from e
            _logger.info("Created %s %s/%s", resource.kind, namespace, resource.metadata.name)

        return mask_secret(provider)

    def delete_provider(self, namespace, name):
        """
        Deletes the resources of provider ``name``: the AIServiceBackend first, then the
        BackendSecurityPolicy, the BackendTLSPolicy, the Backend and finally the Secret created
        for the provider. Only a Secret carrying the console's managed-by label is deleted, so
        Secrets supplied through ``secretRef`` are kept even when they share the provider's name.

        Raises:
            NotFoundError: If the provider does not exist.
            StoreError: Naming the kind of the first resource that could not be deleted. The
                resources deleted before it stay deleted.
        """
        graph = ResourceGraph.from_resources(self.load_provider_resources(namespace, name))
        secret = graph.secret
        if secret is not None and (
            not secret.is_managed()
            or secret.metadata.name != name
            or secret.metadata.namespace != namespace
        ):
            secret = None

        for resource in (
            graph.service_backend,
            graph.security_policy,
            graph.tls_policy,
            graph.backend,
            secret,
        ):
            if resource is None:
                continue
            meta = resource.metadata
            try:
                self._client_for(resource.kind).delete(meta.namespace, meta.name)
            except NotFoundError:
                _logger.debug(
                    "%s %s/%s was already deleted", resource.kind, meta.namespace, meta.name
                )
                continue
            except ConsoleException as e:
                raise StoreError(
                    f"Failed to delete {resource.kind} '{meta.namespace}/{meta.name}': {e.message}",
                    kind=resource.kind,
                ) from e
            _logger.info("Deleted %s %s/%s", resource.kind, meta.namespace, meta.name)

    def health_check(self, timeout=None):
        self._clients.health_check(timeout)
