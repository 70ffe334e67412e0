"""
Translation between the flat ``LLMProvider`` configuration and the Kubernetes resources that
implement it on Envoy AI Gateway.

Every resource generated for a provider reuses the provider's name and namespace. The resources
are emitted in creation order: Backend, BackendTLSPolicy, the credential Secret (only when
credentials are supplied inline), BackendSecurityPolicy and finally the AIServiceBackend that
ties them together.
"""

import logging
from typing import Callable, Iterable, NamedTuple

from aigateway_console.exceptions import IncompleteGraphError, ValidationError
from aigateway_console.llm.constants import (
    GROUP_AIGATEWAY_ENVOY_PROXY,
    GROUP_GATEWAY_ENVOY_PROXY,
    KEY_ACCESS_KEY_ID,
    KEY_API_KEY,
    KEY_CLIENT_SECRET,
    KEY_SECRET_ACCESS_KEY,
    KIND_AI_SERVICE_BACKEND,
    KIND_BACKEND,
    KIND_BACKEND_SECURITY_POLICY,
    LABEL_MANAGED_BY,
    MANAGED_BY_CONSOLE,
    SECURITY_POLICY_TYPE_API_KEY,
    SECURITY_POLICY_TYPE_AWS_CREDENTIALS,
    SECURITY_POLICY_TYPE_AZURE_CREDENTIALS,
    SECURITY_POLICY_TYPE_GCP_CREDENTIALS,
)
from aigateway_console.llm.provider import (
    AuthConfig,
    AuthType,
    AWSAuth,
    AzureAuth,
    Backend,
    GCPAuth,
    LLMProvider,
    SecretRef,
    TLSValidation,
)
from aigateway_console.resources.entities import (
    OIDC,
    AIServiceBackend,
    AIServiceBackendSpec,
    APIKeyCredentials,
    AWSCredentials,
    AWSCredentialsFile,
    AzureCredentials,
    BackendEndpoint,
    BackendObjectReference,
    BackendSecurityPolicy,
    BackendSecurityPolicySpec,
    BackendSpec,
    BackendTLSPolicy,
    BackendTLSPolicySpec,
    BackendTLSPolicyValidation,
    FQDNEndpoint,
    GCPCredentials,
    LocalObjectReference,
    ObjectMeta,
    OIDCExchangeToken,
    OIDCProvider,
    PolicyTargetReference,
    Resource,
    ResourceGraph,
    Secret,
    SecretObjectReference,
    ServiceAccountImpersonation,
    VersionedAPISchema,
    WorkloadIdentityFederationConfig,
)
from aigateway_console.resources.entities import Backend as BackendResource

_logger = logging.getLogger(__name__)


class _GCPField(NamedTuple):
    attribute: str
    fallback: str | None
    display_name: str


# Required GCP fields, each resolved from its canonical attribute, else its legacy fallback
_GCP_REQUIRED_FIELDS = [
    _GCPField("project_id", None, "projectId"),
    _GCPField("location", None, "location"),
    _GCPField("workload_identity_pool_name", "client_email", "workloadIdentityPoolName"),
    _GCPField(
        "workload_identity_provider_name",
        "service_account_project_id",
        "workloadIdentityProviderName",
    ),
    _GCPField("service_account_name", "client_id", "serviceAccountName"),
    _GCPField("oidc_issuer", "auth_uri", "oidcIssuer"),
    _GCPField("oidc_client_id", "token_uri", "oidcClientId"),
]
_GCP_CLIENT_SECRET = _GCPField("oidc_client_secret", "private_key", "oidcClientSecret")


def _resolve(gcp: GCPAuth, field: _GCPField) -> str:
    value = getattr(gcp, field.attribute)
    if not value and field.fallback is not None:
        value = getattr(gcp, field.fallback)
    return value or ""


def resolve_gcp_auth(auth: AuthConfig) -> dict[str, str]:
    """
    Resolves the GCP workload identity federation settings of ``auth``, applying the legacy
    fallbacks documented on :py:class:`GCPAuth`.

    Returns:
        A dict keyed by canonical ``GCPAuth`` attribute name. ``oidc_client_secret`` is empty
        when the credentials come from ``auth.secret_ref``.

    Raises:
        ValidationError: Naming the first required field that is empty after fallback.
    """
    gcp = auth.gcp or GCPAuth()
    resolved = {}
    for field in _GCP_REQUIRED_FIELDS:
        if not (value := _resolve(gcp, field)):
            raise ValidationError(
                f"GCP authentication requires {field.display_name} to be provided",
                field=field.display_name,
            )
        resolved[field.attribute] = value

    client_secret = _resolve(gcp, _GCP_CLIENT_SECRET)
    if not client_secret and auth.secret_ref is None:
        raise ValidationError(
            f"GCP authentication requires {_GCP_CLIENT_SECRET.display_name} (or an existing "
            "secret in secretRef) to be provided",
            field=_GCP_CLIENT_SECRET.display_name,
        )
    resolved[_GCP_CLIENT_SECRET.attribute] = client_secret
    return resolved


def _metadata(provider: LLMProvider) -> ObjectMeta:
    return ObjectMeta(name=provider.name, namespace=provider.namespace)


def _own_secret_ref(provider: LLMProvider) -> SecretObjectReference:
    return SecretObjectReference(name=provider.name, namespace=provider.namespace)


def _external_secret_ref(provider: LLMProvider) -> SecretObjectReference:
    ref = provider.auth.secret_ref
    return SecretObjectReference(name=ref.name, namespace=ref.namespace or provider.namespace)


def _credential_secret(provider: LLMProvider, string_data: dict[str, str]) -> Secret:
    metadata = _metadata(provider)
    metadata.labels = {LABEL_MANAGED_BY: MANAGED_BY_CONSOLE}
    return Secret(metadata=metadata, string_data=string_data)


def _api_key_credentials(provider: LLMProvider, spec: BackendSecurityPolicySpec):
    auth = provider.auth
    spec.type = SECURITY_POLICY_TYPE_API_KEY
    if auth.secret_ref is not None:
        spec.api_key = APIKeyCredentials(secret_ref=_external_secret_ref(provider))
    elif auth.api_key:
        spec.api_key = APIKeyCredentials(secret_ref=_own_secret_ref(provider))
        return _credential_secret(provider, {KEY_API_KEY: auth.api_key})
    return None


def _aws_credentials(provider: LLMProvider, spec: BackendSecurityPolicySpec):
    auth = provider.auth
    spec.type = SECURITY_POLICY_TYPE_AWS_CREDENTIALS
    region = auth.aws.region if auth.aws else ""
    if auth.secret_ref is not None:
        spec.aws_credentials = AWSCredentials(
            region=region,
            credentials_file=AWSCredentialsFile(secret_ref=_external_secret_ref(provider)),
        )
    elif auth.aws is not None:
        spec.aws_credentials = AWSCredentials(
            region=region,
            credentials_file=AWSCredentialsFile(secret_ref=_own_secret_ref(provider)),
        )
        return _credential_secret(
            provider,
            {
                KEY_ACCESS_KEY_ID: auth.aws.access_key_id,
                KEY_SECRET_ACCESS_KEY: auth.aws.secret_access_key,
            },
        )
    return None


def _azure_credentials(provider: LLMProvider, spec: BackendSecurityPolicySpec):
    auth = provider.auth
    spec.type = SECURITY_POLICY_TYPE_AZURE_CREDENTIALS
    azure = auth.azure or AzureAuth()
    if auth.secret_ref is not None:
        spec.azure_credentials = AzureCredentials(
            client_id=azure.client_id,
            tenant_id=azure.tenant_id,
            client_secret_ref=_external_secret_ref(provider),
        )
    elif auth.azure is not None:
        spec.azure_credentials = AzureCredentials(
            client_id=azure.client_id,
            tenant_id=azure.tenant_id,
            client_secret_ref=_own_secret_ref(provider),
        )
        return _credential_secret(provider, {KEY_CLIENT_SECRET: azure.api_key})
    return None


def _gcp_credentials(provider: LLMProvider, spec: BackendSecurityPolicySpec):
    auth = provider.auth
    spec.type = SECURITY_POLICY_TYPE_GCP_CREDENTIALS
    resolved = resolve_gcp_auth(auth)
    secret = None
    if auth.secret_ref is not None:
        secret_ref = _external_secret_ref(provider)
    else:
        secret_ref = _own_secret_ref(provider)
        secret = _credential_secret(provider, {KEY_CLIENT_SECRET: resolved["oidc_client_secret"]})

    spec.gcp_credentials = GCPCredentials(
        project_name=resolved["project_id"],
        region=resolved["location"],
        workload_identity_federation_config=WorkloadIdentityFederationConfig(
            project_id=resolved["project_id"],
            workload_identity_pool_name=resolved["workload_identity_pool_name"],
            workload_identity_provider_name=resolved["workload_identity_provider_name"],
            service_account_impersonation=ServiceAccountImpersonation(
                service_account_name=resolved["service_account_name"]
            ),
            oidc_exchange_token=OIDCExchangeToken(
                oidc=OIDC(
                    provider=OIDCProvider(issuer=resolved["oidc_issuer"]),
                    client_id=resolved["oidc_client_id"],
                    client_secret=secret_ref,
                )
            ),
        ),
    )
    return secret


_CREDENTIAL_BUILDERS: dict[AuthType, Callable] = {
    AuthType.API_KEY: _api_key_credentials,
    AuthType.AWS: _aws_credentials,
    AuthType.AZURE: _azure_credentials,
    AuthType.GCP: _gcp_credentials,
}


def to_envoy_gateway_resources(provider: LLMProvider) -> list[Resource]:
    """
    Translates ``provider`` into the Kubernetes resources that implement it.

    An unknown or empty ``auth.type`` produces a BackendSecurityPolicy without credentials.

    Args:
        provider: The provider to translate. Its name and namespace are used for every resource.

    Returns:
        The resources in creation order.

    Raises:
        ValidationError: If GCP credentials are incomplete. No resources are returned in that
            case.
    """
    backend = BackendResource(
        metadata=_metadata(provider),
        spec=BackendSpec(
            endpoints=[
                BackendEndpoint(
                    fqdn=FQDNEndpoint(hostname=provider.backend.host, port=provider.backend.port)
                )
            ]
        ),
    )
    tls_policy = BackendTLSPolicy(
        metadata=_metadata(provider),
        spec=BackendTLSPolicySpec(
            target_refs=[
                PolicyTargetReference(
                    group=GROUP_GATEWAY_ENVOY_PROXY, kind=KIND_BACKEND, name=provider.name
                )
            ],
            validation=BackendTLSPolicyValidation(
                hostname=provider.tls.hostname,
                well_known_ca_certificates=provider.tls.well_known_ca_certificates or None,
            ),
        ),
    )
    security_policy = BackendSecurityPolicy(
        metadata=_metadata(provider),
        spec=BackendSecurityPolicySpec(
            target_refs=[
                PolicyTargetReference(
                    group=GROUP_AIGATEWAY_ENVOY_PROXY,
                    kind=KIND_AI_SERVICE_BACKEND,
                    name=provider.name,
                )
            ]
        ),
    )

    secret = None
    if (auth_type := provider.auth.auth_type) is not None:
        secret = _CREDENTIAL_BUILDERS[auth_type](provider, security_policy.spec)
    else:
        _logger.debug(
            "Provider %s/%s has unsupported auth type %r; no credentials are configured",
            provider.namespace,
            provider.name,
            provider.auth.type,
        )

    service_backend = AIServiceBackend(
        metadata=_metadata(provider),
        spec=AIServiceBackendSpec(
            api_schema=VersionedAPISchema(name=provider.api_schema, version=provider.version),
            backend_ref=BackendObjectReference(
                group=GROUP_GATEWAY_ENVOY_PROXY,
                kind=KIND_BACKEND,
                name=provider.name,
                namespace=provider.namespace,
                port=provider.backend.port,
            ),
            backend_security_policy_ref=LocalObjectReference(
                group=GROUP_AIGATEWAY_ENVOY_PROXY,
                kind=KIND_BACKEND_SECURITY_POLICY,
                name=provider.name,
            ),
        ),
    )

    resources = [backend, tls_policy]
    if secret is not None:
        resources.append(secret)
    resources.extend([security_policy, service_backend])
    return resources


def _secret_ref_of(
    ref: SecretObjectReference | None, service_backend: AIServiceBackend, secret: Secret | None
) -> SecretRef | None:
    """
    Returns the reference as a ``SecretRef`` if it points at a Secret other than the one
    synthesized for the provider itself, otherwise None.

    A Secret sharing the provider's name and namespace only counts as synthesized when it
    carries the console's managed-by label. When that Secret could not be loaded, the name
    match alone decides.
    """
    if ref is None:
        return None
    meta = service_backend.metadata
    namespace = ref.namespace or meta.namespace
    if ref.name == meta.name and namespace == meta.namespace:
        if secret is None or secret.is_managed():
            return None
    return SecretRef(name=ref.name, namespace=namespace)


def _secret_value(secret: Secret | None, key: str) -> str:
    if secret is None:
        return ""
    return secret.get_value(key) or ""


def _read_api_key(spec: BackendSecurityPolicySpec, secret, secret_ref) -> AuthConfig:
    api_key = None
    if secret_ref is None and spec.api_key is not None and spec.api_key.secret_ref is not None:
        api_key = _secret_value(secret, KEY_API_KEY) or None
    return AuthConfig(type=AuthType.API_KEY.value, api_key=api_key, secret_ref=secret_ref)


def _read_aws(spec: BackendSecurityPolicySpec, secret, secret_ref) -> AuthConfig:
    aws = AWSAuth()
    if spec.aws_credentials is not None:
        aws.region = spec.aws_credentials.region
        if secret_ref is None:
            aws.access_key_id = _secret_value(secret, KEY_ACCESS_KEY_ID)
            aws.secret_access_key = _secret_value(secret, KEY_SECRET_ACCESS_KEY)
    return AuthConfig(type=AuthType.AWS.value, aws=aws, secret_ref=secret_ref)


def _read_azure(spec: BackendSecurityPolicySpec, secret, secret_ref) -> AuthConfig:
    azure = AzureAuth()
    if spec.azure_credentials is not None:
        azure.client_id = spec.azure_credentials.client_id
        azure.tenant_id = spec.azure_credentials.tenant_id
        if secret_ref is None:
            azure.api_key = _secret_value(secret, KEY_CLIENT_SECRET)
    return AuthConfig(type=AuthType.AZURE.value, azure=azure, secret_ref=secret_ref)


def _read_gcp(spec: BackendSecurityPolicySpec, secret, secret_ref) -> AuthConfig:
    gcp = GCPAuth()
    if (credentials := spec.gcp_credentials) is not None:
        federation = credentials.workload_identity_federation_config
        oidc = federation.oidc_exchange_token.oidc
        gcp.project_id = credentials.project_name
        gcp.location = credentials.region
        gcp.workload_identity_pool_name = federation.workload_identity_pool_name
        gcp.workload_identity_provider_name = federation.workload_identity_provider_name
        if federation.service_account_impersonation is not None:
            gcp.service_account_name = (
                federation.service_account_impersonation.service_account_name
            )
        gcp.oidc_issuer = oidc.provider.issuer
        gcp.oidc_client_id = oidc.client_id or ""
        if secret_ref is None:
            gcp.oidc_client_secret = _secret_value(secret, KEY_CLIENT_SECRET)
    return AuthConfig(type=AuthType.GCP.value, gcp=gcp, secret_ref=secret_ref)


_AUTH_READERS = {
    SECURITY_POLICY_TYPE_API_KEY: _read_api_key,
    SECURITY_POLICY_TYPE_AWS_CREDENTIALS: _read_aws,
    SECURITY_POLICY_TYPE_AZURE_CREDENTIALS: _read_azure,
    SECURITY_POLICY_TYPE_GCP_CREDENTIALS: _read_gcp,
}


def to_llm_provider(resources: Iterable | ResourceGraph) -> LLMProvider:
    """
    Reassembles the flat provider configuration from its resources, the inverse of
    :py:func:`to_envoy_gateway_resources`. Only canonical fields are restored; legacy GCP
    fields are never reconstructed.

    Args:
        resources: The resources of one provider, in any order, as typed models or raw dicts,
            or an already classified ``ResourceGraph``.

    Raises:
        UnrecognizedResourceError: If a resource is not one of the five known kinds.
        IncompleteGraphError: If the Backend, BackendSecurityPolicy or AIServiceBackend is
            missing.
    """
    graph = resources if isinstance(resources, ResourceGraph) else ResourceGraph.from_resources(
        resources
    )
    missing = [
        kind
        for kind, resource in (
            (KIND_BACKEND, graph.backend),
            (KIND_BACKEND_SECURITY_POLICY, graph.security_policy),
            (KIND_AI_SERVICE_BACKEND, graph.service_backend),
        )
        if resource is None
    ]
    if missing:
        raise IncompleteGraphError(
            f"Missing required resources to reconstruct LLMProvider: {', '.join(missing)}",
            missing=missing,
        )

    service_backend = graph.service_backend
    provider = LLMProvider(
        name=service_backend.metadata.name,
        namespace=service_backend.metadata.namespace,
        api_schema=service_backend.spec.api_schema.name,
        version=service_backend.spec.api_schema.version,
    )

    endpoints = graph.backend.spec.endpoints
    if endpoints and endpoints[0].fqdn is not None:
        provider.backend = Backend(host=endpoints[0].fqdn.hostname, port=endpoints[0].fqdn.port)

    if graph.tls_policy is not None and graph.tls_policy.spec.validation.hostname:
        validation = graph.tls_policy.spec.validation
        provider.tls = TLSValidation(
            hostname=validation.hostname,
            well_known_ca_certificates=validation.well_known_ca_certificates or "",
        )

    spec = graph.security_policy.spec
    if (reader := _AUTH_READERS.get(spec.type)) is not None:
        secret_ref = _secret_ref_of(spec.credential_secret_ref(), service_backend, graph.secret)
        provider.auth = reader(spec, graph.secret, secret_ref)
    return provider
