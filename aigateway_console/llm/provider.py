from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from aigateway_console.llm.masking import mask_value


class ProviderModel(
    BaseModel,
    # Ignore extra fields so that older or newer clients can still submit providers
    extra="ignore",
):
    """
    A pydantic model representing part of the user-facing LLM provider configuration. Fields are
    exposed in camelCase on the wire and can be populated by either name.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class _CaseInsensitiveEnum(str, Enum):
    @classmethod
    def _missing_(cls, value):
        """
        Implements case-insensitive matching of enumerant strings
        """
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None

    @classmethod
    def canonicalize(cls, value):
        """
        Returns the canonical spelling of ``value`` if it names a member, otherwise ``value``
        unchanged. Unknown values are preserved so they can be reported or round-tripped.
        """
        if value is None:
            return value
        try:
            return cls(value).value
        except ValueError:
            return value


class AuthType(_CaseInsensitiveEnum):
    API_KEY = "apiKey"
    AWS = "aws"
    AZURE = "azure"
    GCP = "gcp"


class APISchema(_CaseInsensitiveEnum):
    OPENAI = "OpenAI"
    AWS_BEDROCK = "AWSBedrock"
    AZURE_OPENAI = "AzureOpenAI"
    GCP_VERTEX_AI = "GCPVertexAI"


class SecretRef(ProviderModel):
    name: str = ""
    namespace: str = ""


class AWSAuth(ProviderModel):
    region: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""

    def mask_secret(self) -> "AWSAuth":
        return self.model_copy(
            update={
                "access_key_id": mask_value(self.access_key_id),
                "secret_access_key": mask_value(self.secret_access_key),
            },
            deep=True,
        )


class GCPAuth(ProviderModel):
    """
    GCP Vertex AI credentials using workload identity federation.

    The trailing legacy fields are accepted for backward compatibility and are only consulted
    when the matching canonical field is empty:

    ============================== =============================
    Canonical field                Legacy fallback
    ============================== =============================
    workload_identity_pool_name    client_email
    workload_identity_provider_name service_account_project_id
    service_account_name           client_id
    oidc_issuer                    auth_uri
    oidc_client_id                 token_uri
    oidc_client_secret             private_key
    ============================== =============================
    """

    project_id: str = ""
    location: str = ""

    workload_identity_pool_name: str = ""
    workload_identity_provider_name: str = ""
    service_account_name: str = ""

    oidc_issuer: str = ""
    oidc_client_id: str = ""
    oidc_client_secret: str = ""

    private_key: str | None = None
    client_email: str | None = None
    service_account_project_id: str | None = None
    client_id: str | None = None
    auth_uri: str | None = None
    token_uri: str | None = None

    def mask_secret(self) -> "GCPAuth":
        return self.model_copy(
            update={
                "oidc_client_secret": mask_value(self.oidc_client_secret),
                "private_key": mask_value(self.private_key),
            },
            deep=True,
        )


class AzureAuth(ProviderModel):
    client_id: str = ""
    tenant_id: str = ""
    api_key: str = ""

    def mask_secret(self) -> "AzureAuth":
        return self.model_copy(update={"api_key": mask_value(self.api_key)}, deep=True)


_CREDENTIAL_FIELDS = {
    AuthType.API_KEY.value: "api_key",
    AuthType.AWS.value: "aws",
    AuthType.AZURE.value: "azure",
    AuthType.GCP.value: "gcp",
}


class AuthConfig(ProviderModel):
    """
    Authentication settings of a provider. Exactly one credential-supply mode applies: either
    the inline payload matching ``type`` (``api_key``, ``aws``, ``azure`` or ``gcp``), from which
    a Secret is synthesized, or ``secret_ref`` pointing at a Secret that already exists.
    """

    type: str = ""
    secret_ref: SecretRef | None = None
    api_key: str | None = None
    aws: AWSAuth | None = None
    gcp: GCPAuth | None = None
    azure: AzureAuth | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        return AuthType.canonicalize(value)

    @model_validator(mode="after")
    def _validate_single_payload(self):
        populated = [
            auth_type
            for auth_type, field in _CREDENTIAL_FIELDS.items()
            if getattr(self, field)
        ]
        if len(populated) > 1:
            raise ValueError(
                f"Only one credential payload may be set, got {', '.join(populated)}"
            )
        if populated and self.type in _CREDENTIAL_FIELDS and populated[0] != self.type:
            raise ValueError(
                f"Credential payload '{populated[0]}' does not match auth type '{self.type}'"
            )
        return self

    @property
    def auth_type(self) -> AuthType | None:
        try:
            return AuthType(self.type)
        except ValueError:
            return None

    @property
    def credentials(self):
        """
        The inline credential payload selected by ``type``, or None.
        """
        if (auth_type := self.auth_type) is None:
            return None
        return getattr(self, _CREDENTIAL_FIELDS[auth_type.value]) or None

    def mask_secret(self) -> "AuthConfig":
        return self.model_copy(
            update={
                "api_key": mask_value(self.api_key),
                "aws": self.aws.mask_secret() if self.aws else None,
                "gcp": self.gcp.mask_secret() if self.gcp else None,
                "azure": self.azure.mask_secret() if self.azure else None,
            },
            deep=True,
        )


class Backend(ProviderModel):
    host: str = ""
    port: int = 0


class TLSValidation(ProviderModel):
    hostname: str = ""
    well_known_ca_certificates: str = Field("", alias="wellKnownCACertificates")


class LLMProvider(ProviderModel):
    """
    Flat configuration of one LLM provider. ``name`` and ``namespace`` identify the provider and
    every Kubernetes resource generated for it.
    """

    name: str = ""
    namespace: str = ""
    api_schema: str = Field("", alias="schema")
    version: str | None = None
    auth: AuthConfig = Field(default_factory=AuthConfig)
    backend: Backend = Field(default_factory=Backend)
    tls: TLSValidation = Field(default_factory=TLSValidation)

    @field_validator("api_schema", mode="before")
    @classmethod
    def _normalize_schema(cls, value):
        return APISchema.canonicalize(value)

    def mask_secret(self) -> "LLMProvider":
        return self.model_copy(update={"auth": self.auth.mask_secret()}, deep=True)
