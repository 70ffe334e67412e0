import logging

import kubernetes
from kubernetes.config.config_exception import ConfigException

from aigateway_console.environment_variables import (
    AIGW_CONSOLE_HEALTH_CHECK_TIMEOUT,
    AIGW_CONSOLE_KUBE_CONTEXT,
    AIGW_CONSOLE_KUBECONFIG,
    AIGW_CONSOLE_REQUEST_TIMEOUT,
)
from aigateway_console.exceptions import NotFoundError
from aigateway_console.llm.constants import (
    GROUP_AIGATEWAY_ENVOY_PROXY,
    GROUP_GATEWAY_ENVOY_PROXY,
    GROUP_GATEWAY_NETWORKING,
    KIND_AI_SERVICE_BACKEND,
    KIND_BACKEND,
    KIND_BACKEND_SECURITY_POLICY,
    KIND_BACKEND_TLS_POLICY,
)
from aigateway_console.store.client import ResourceClient, SecretClient

_logger = logging.getLogger(__name__)

# kind -> (group, version, plural)
CUSTOM_RESOURCE_COORDINATES = {
    KIND_BACKEND: (GROUP_GATEWAY_ENVOY_PROXY, "v1alpha1", "backends"),
    KIND_BACKEND_TLS_POLICY: (GROUP_GATEWAY_NETWORKING, "v1alpha3", "backendtlspolicies"),
    KIND_BACKEND_SECURITY_POLICY: (
        GROUP_AIGATEWAY_ENVOY_PROXY,
        "v1alpha1",
        "backendsecuritypolicies",
    ),
    KIND_AI_SERVICE_BACKEND: (GROUP_AIGATEWAY_ENVOY_PROXY, "v1alpha1", "aiservicebackends"),
}


def load_kube_config(kubeconfig=None, context=None):
    """
    Loads the kubeconfig at ``kubeconfig`` (or the default location) for ``context``, falling back
    to the in-cluster service account configuration.
    """
    try:
        # trying to load either the file passed as arg or, if None,
        # the one provided as env var `KUBECONFIG` or in `~/.kube/config`
        kubernetes.config.load_kube_config(config_file=kubeconfig, context=context)
    except (OSError, ConfigException) as e:
        _logger.debug('Error loading kube config "%s" (context "%s"): %s', kubeconfig, context, e)
        _logger.info("No valid kube config found, using in-cluster configuration")
        kubernetes.config.load_incluster_config()


class ClientManager:
    """
    Bundles the clients for every resource kind of an LLM provider over one Kubernetes API
    connection. The underlying connection is safe to share between concurrent requests.
    """

    def __init__(self, kubeconfig=None, context=None, api_client=None, request_timeout=None):
        if api_client is None:
            load_kube_config(
                kubeconfig or AIGW_CONSOLE_KUBECONFIG.get(),
                context or AIGW_CONSOLE_KUBE_CONTEXT.get(),
            )
            api_client = kubernetes.client.ApiClient()
        if request_timeout is None:
            request_timeout = AIGW_CONSOLE_REQUEST_TIMEOUT.get()

        self._core_api = kubernetes.client.CoreV1Api(api_client)
        custom_api = kubernetes.client.CustomObjectsApi(api_client)

        def _custom_client(kind):
            group, version, plural = CUSTOM_RESOURCE_COORDINATES[kind]
            return ResourceClient(custom_api, kind, group, version, plural, request_timeout)

        self.backend = _custom_client(KIND_BACKEND)
        self.backend_tls_policy = _custom_client(KIND_BACKEND_TLS_POLICY)
        self.backend_security_policy = _custom_client(KIND_BACKEND_SECURITY_POLICY)
        self.ai_service_backend = _custom_client(KIND_AI_SERVICE_BACKEND)
        self.secret = SecretClient(self._core_api, api_client, request_timeout)

    def health_check(self, timeout=None):
        """
        Verifies that the Kubernetes API is reachable by listing a single namespace.

        Raises:
            kubernetes.client.exceptions.ApiException: If the API server rejects the request.
            urllib3.exceptions.HTTPError: If the API server cannot be reached in time.
        """
        if timeout is None:
            timeout = AIGW_CONSOLE_HEALTH_CHECK_TIMEOUT.get()
        self._core_api.list_namespace(limit=1, _request_timeout=timeout)

    def load_envoy_gateway_resources(self, namespace, name):
        """
        Fetches the resource of every kind named ``name`` in ``namespace``, skipping kinds with no
        such resource. Unlike the relationship walk of the provider loader this assumes every
        resource shares the provider's name.
        """
        resources = []
        for client in (
            self.backend,
            self.backend_tls_policy,
            self.secret,
            self.backend_security_policy,
            self.ai_service_backend,
        ):
            try:
                resources.append(client.get(namespace, name))
            except NotFoundError:
                _logger.debug("No %s named %s/%s", client.kind, namespace, name)
        return resources
