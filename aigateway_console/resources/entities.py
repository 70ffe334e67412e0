"""
Typed models of the Kubernetes objects that make up an LLM provider's resource graph.

Each model serializes to the camelCase JSON accepted by the Envoy Gateway, Envoy AI Gateway and
core Kubernetes APIs. ``Resource`` is the closed union over the five kinds, discriminated on
``kind``.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from aigateway_console.exceptions import UnrecognizedResourceError
from aigateway_console.llm.constants import (
    API_VERSION_AIGATEWAY_V1ALPHA1,
    API_VERSION_GATEWAY_V1ALPHA1,
    API_VERSION_GATEWAY_V1ALPHA3,
    API_VERSION_V1,
    KIND_AI_SERVICE_BACKEND,
    KIND_BACKEND,
    KIND_BACKEND_SECURITY_POLICY,
    KIND_BACKEND_TLS_POLICY,
    KIND_SECRET,
    LABEL_MANAGED_BY,
    MANAGED_BY_CONSOLE,
    SECRET_TYPE_OPAQUE,
    SECURITY_POLICY_TYPE_API_KEY,
    SECURITY_POLICY_TYPE_AWS_CREDENTIALS,
    SECURITY_POLICY_TYPE_AZURE_CREDENTIALS,
    SECURITY_POLICY_TYPE_GCP_CREDENTIALS,
)

_logger = logging.getLogger(__name__)


class KubernetesModel(
    BaseModel,
    # Ignore server-populated fields (status, managedFields, ...) that are not modelled
    extra="ignore",
):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ObjectMeta(KubernetesModel):
    name: str = ""
    namespace: str = ""
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    resource_version: str | None = None


class PolicyTargetReference(KubernetesModel):
    group: str = ""
    kind: str = ""
    name: str = ""
    section_name: str | None = None

    def matches(self, name: str, kind: str, groups: Iterable[str]) -> bool:
        return self.name == name and self.kind == kind and self.group in groups


class SecretObjectReference(KubernetesModel):
    name: str = ""
    namespace: str | None = None
    group: str | None = None
    kind: str | None = None


class FQDNEndpoint(KubernetesModel):
    hostname: str = ""
    port: int = 0


class BackendEndpoint(KubernetesModel):
    fqdn: FQDNEndpoint | None = None


class BackendSpec(KubernetesModel):
    endpoints: list[BackendEndpoint] = Field(default_factory=list)


class Backend(KubernetesModel):
    kind: Literal["Backend"] = KIND_BACKEND
    api_version: str = API_VERSION_GATEWAY_V1ALPHA1
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: BackendSpec = Field(default_factory=BackendSpec)


class BackendTLSPolicyValidation(KubernetesModel):
    hostname: str = ""
    well_known_ca_certificates: str | None = Field(None, alias="wellKnownCACertificates")


class BackendTLSPolicySpec(KubernetesModel):
    target_refs: list[PolicyTargetReference] = Field(default_factory=list)
    validation: BackendTLSPolicyValidation = Field(default_factory=BackendTLSPolicyValidation)


class BackendTLSPolicy(KubernetesModel):
    kind: Literal["BackendTLSPolicy"] = KIND_BACKEND_TLS_POLICY
    api_version: str = API_VERSION_GATEWAY_V1ALPHA3
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: BackendTLSPolicySpec = Field(default_factory=BackendTLSPolicySpec)


class APIKeyCredentials(KubernetesModel):
    secret_ref: SecretObjectReference | None = None


class AWSCredentialsFile(KubernetesModel):
    secret_ref: SecretObjectReference | None = None
    profile: str | None = None


class AWSCredentials(KubernetesModel):
    region: str = ""
    credentials_file: AWSCredentialsFile | None = None


class AzureCredentials(KubernetesModel):
    client_id: str = Field("", alias="clientID")
    tenant_id: str = Field("", alias="tenantID")
    client_secret_ref: SecretObjectReference | None = None


class OIDCProvider(KubernetesModel):
    issuer: str = ""


class OIDC(KubernetesModel):
    provider: OIDCProvider = Field(default_factory=OIDCProvider)
    client_id: str | None = Field(None, alias="clientID")
    client_secret: SecretObjectReference | None = None


class OIDCExchangeToken(KubernetesModel):
    oidc: OIDC = Field(default_factory=OIDC)


class ServiceAccountImpersonation(KubernetesModel):
    service_account_name: str = ""


class WorkloadIdentityFederationConfig(KubernetesModel):
    project_id: str = Field("", alias="projectID")
    workload_identity_pool_name: str = ""
    workload_identity_provider_name: str = ""
    service_account_impersonation: ServiceAccountImpersonation | None = None
    oidc_exchange_token: OIDCExchangeToken = Field(default_factory=OIDCExchangeToken)


class GCPCredentials(KubernetesModel):
    project_name: str = ""
    region: str = ""
    workload_identity_federation_config: WorkloadIdentityFederationConfig = Field(
        default_factory=WorkloadIdentityFederationConfig
    )


class BackendSecurityPolicySpec(KubernetesModel):
    type: str | None = None
    target_refs: list[PolicyTargetReference] | None = None
    api_key: APIKeyCredentials | None = None
    aws_credentials: AWSCredentials | None = None
    azure_credentials: AzureCredentials | None = None
    gcp_credentials: GCPCredentials | None = None

    def credential_secret_ref(self) -> SecretObjectReference | None:
        """
        Returns the reference to the Secret holding this policy's credential material, read from
        the credential shape selected by ``type``.
        """
        if self.type == SECURITY_POLICY_TYPE_API_KEY and self.api_key is not None:
            return self.api_key.secret_ref
        if (
            self.type == SECURITY_POLICY_TYPE_AWS_CREDENTIALS
            and self.aws_credentials is not None
            and self.aws_credentials.credentials_file is not None
        ):
            return self.aws_credentials.credentials_file.secret_ref
        if self.type == SECURITY_POLICY_TYPE_GCP_CREDENTIALS and self.gcp_credentials is not None:
            federation = self.gcp_credentials.workload_identity_federation_config
            return federation.oidc_exchange_token.oidc.client_secret
        if (
            self.type == SECURITY_POLICY_TYPE_AZURE_CREDENTIALS
            and self.azure_credentials is not None
        ):
            return self.azure_credentials.client_secret_ref
        return None


class BackendSecurityPolicy(KubernetesModel):
    kind: Literal["BackendSecurityPolicy"] = KIND_BACKEND_SECURITY_POLICY
    api_version: str = API_VERSION_AIGATEWAY_V1ALPHA1
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: BackendSecurityPolicySpec = Field(default_factory=BackendSecurityPolicySpec)


class VersionedAPISchema(KubernetesModel):
    name: str = ""
    version: str | None = None


class BackendObjectReference(KubernetesModel):
    group: str | None = None
    kind: str | None = None
    name: str = ""
    namespace: str | None = None
    port: int | None = None


class LocalObjectReference(KubernetesModel):
    group: str = ""
    kind: str = ""
    name: str = ""


class AIServiceBackendSpec(KubernetesModel):
    api_schema: VersionedAPISchema = Field(default_factory=VersionedAPISchema, alias="schema")
    backend_ref: BackendObjectReference = Field(default_factory=BackendObjectReference)
    backend_security_policy_ref: LocalObjectReference | None = None


class AIServiceBackend(KubernetesModel):
    kind: Literal["AIServiceBackend"] = KIND_AI_SERVICE_BACKEND
    api_version: str = API_VERSION_AIGATEWAY_V1ALPHA1
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: AIServiceBackendSpec = Field(default_factory=AIServiceBackendSpec)


class Secret(KubernetesModel):
    kind: Literal["Secret"] = KIND_SECRET
    api_version: str = API_VERSION_V1
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    type: str = SECRET_TYPE_OPAQUE
    string_data: dict[str, str] | None = None
    # Values are base64 encoded, as returned by the Kubernetes API
    data: dict[str, str] | None = None

    def is_managed(self) -> bool:
        """
        Whether this Secret was synthesized by the console for a provider's inline credentials.
        """
        return (self.metadata.labels or {}).get(LABEL_MANAGED_BY) == MANAGED_BY_CONSOLE

    def get_value(self, key: str) -> str | None:
        """
        Returns the value stored under ``key``, looking at ``stringData`` before the base64
        encoded ``data``. Returns None when the key is absent from both.
        """
        if self.string_data and key in self.string_data:
            return self.string_data[key]
        if self.data and key in self.data:
            try:
                return base64.b64decode(self.data[key]).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError):
                _logger.debug(
                    "Ignoring undecodable key %s of Secret %s/%s",
                    key,
                    self.metadata.namespace,
                    self.metadata.name,
                )
        return None


Resource = Annotated[
    Union[Backend, BackendTLSPolicy, BackendSecurityPolicy, AIServiceBackend, Secret],
    Field(discriminator="kind"),
]

_RESOURCE_TYPES = (Backend, BackendTLSPolicy, BackendSecurityPolicy, AIServiceBackend, Secret)

RESOURCE_KINDS = (
    KIND_BACKEND,
    KIND_BACKEND_TLS_POLICY,
    KIND_BACKEND_SECURITY_POLICY,
    KIND_AI_SERVICE_BACKEND,
    KIND_SECRET,
)

_resource_adapter = TypeAdapter(Resource)


def parse_resource(obj) -> Resource:
    """
    Validates a raw Kubernetes object (a dict as returned by the API) into its typed model.

    Raises:
        UnrecognizedResourceError: If ``obj`` is not one of the five known resource kinds or does
            not conform to its kind's schema.
    """
    if isinstance(obj, _RESOURCE_TYPES):
        return obj
    if not isinstance(obj, dict):
        raise UnrecognizedResourceError(f"Unexpected resource type: {type(obj).__name__}")
    kind = obj.get("kind")
    if kind not in RESOURCE_KINDS:
        raise UnrecognizedResourceError(f"Unexpected resource kind: {kind!r}")
    try:
        return _resource_adapter.validate_python(obj)
    except PydanticValidationError as e:
        raise UnrecognizedResourceError(f"Malformed {kind} resource: {e}") from e


@dataclass
class ResourceGraph:
    """
    The resources of one provider, classified into one slot per kind.
    """

    backend: Backend | None = None
    tls_policy: BackendTLSPolicy | None = None
    security_policy: BackendSecurityPolicy | None = None
    service_backend: AIServiceBackend | None = None
    secret: Secret | None = None

    @classmethod
    def from_resources(cls, resources: Iterable) -> "ResourceGraph":
        graph = cls()
        for resource in resources:
            resource = parse_resource(resource)
            if isinstance(resource, Backend):
                graph.backend = resource
            elif isinstance(resource, BackendTLSPolicy):
                graph.tls_policy = resource
            elif isinstance(resource, BackendSecurityPolicy):
                graph.security_policy = resource
            elif isinstance(resource, AIServiceBackend):
                graph.service_backend = resource
            elif isinstance(resource, Secret):
                graph.secret = resource
            else:
                raise UnrecognizedResourceError(
                    f"Unexpected resource type: {type(resource).__name__}"
                )
        return graph

    def resources(self) -> list[Resource]:
        """
        Returns the populated slots in creation order.
        """
        return [
            resource
            for resource in (
                self.backend,
                self.tls_policy,
                self.secret,
                self.security_policy,
                self.service_backend,
            )
            if resource is not None
        ]
