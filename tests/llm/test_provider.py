import pydantic
import pytest

from aigateway_console.llm.provider import (
    APISchema,
    AuthConfig,
    AuthType,
    AWSAuth,
    LLMProvider,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("apiKey", "apiKey"),
        ("APIKey", "apiKey"),
        ("APIKEY", "apiKey"),
        ("AWS", "aws"),
        ("Azure", "azure"),
        ("gCp", "gcp"),
    ],
)
def test_auth_type_is_normalized_case_insensitively(value, expected):
    auth = AuthConfig(type=value)
    assert auth.type == expected
    assert auth.auth_type == AuthType(expected)


def test_unknown_auth_type_is_preserved():
    auth = AuthConfig(type="oauth")
    assert auth.type == "oauth"
    assert auth.auth_type is None
    assert auth.credentials is None


def test_schema_is_normalized_and_unknown_schema_preserved():
    assert LLMProvider(schema="openai").api_schema == APISchema.OPENAI.value
    assert LLMProvider(schema="gcpvertexai").api_schema == "GCPVertexAI"
    assert LLMProvider(schema="Anthropic").api_schema == "Anthropic"


def test_provider_parses_camel_case_json():
    provider = LLMProvider.model_validate(
        {
            "name": "bedrock",
            "namespace": "llm",
            "schema": "AWSBedrock",
            "auth": {
                "type": "aws",
                "aws": {"region": "us-east-1", "accessKeyId": "id", "secretAccessKey": "key"},
            },
            "backend": {"host": "bedrock.amazonaws.com", "port": 443},
            "tls": {"hostname": "bedrock.amazonaws.com", "wellKnownCACertificates": "System"},
        }
    )
    assert provider.auth.aws == AWSAuth(
        region="us-east-1", access_key_id="id", secret_access_key="key"
    )
    assert provider.auth.credentials is provider.auth.aws
    assert provider.backend.port == 443
    assert provider.tls.well_known_ca_certificates == "System"


def test_provider_to_dict_uses_wire_names_and_omits_unset_fields(openai_provider):
    data = openai_provider.to_dict()
    assert data["schema"] == "OpenAI"
    assert data["tls"] == {"hostname": "api.openai.com", "wellKnownCACertificates": "System"}
    assert data["auth"] == {"type": "apiKey", "apiKey": "sk-abc"}
    assert "version" not in LLMProvider(name="p").to_dict()


def test_provider_round_trips_through_json(gcp_legacy_provider):
    restored = LLMProvider.model_validate(gcp_legacy_provider.to_dict())
    assert restored == gcp_legacy_provider


def test_unknown_fields_are_ignored():
    provider = LLMProvider.model_validate({"name": "p", "status": "active"})
    assert provider.name == "p"


def test_multiple_credential_payloads_are_rejected():
    with pytest.raises(pydantic.ValidationError, match="Only one credential payload"):
        AuthConfig(type="aws", aws={"region": "us-east-1"}, azure={"clientId": "c"})


def test_payload_must_match_auth_type():
    with pytest.raises(pydantic.ValidationError, match="does not match auth type 'azure'"):
        AuthConfig(type="azure", aws={"region": "us-east-1"})


def test_secret_ref_alone_is_accepted():
    auth = AuthConfig(type="apiKey", secretRef={"name": "shared", "namespace": "creds"})
    assert auth.secret_ref.name == "shared"
    assert auth.credentials is None


def test_empty_api_key_is_omitted(aws_provider):
    assert aws_provider.auth.api_key is None
    assert "apiKey" not in aws_provider.to_dict()["auth"]
    assert "apiKey" not in AuthConfig(type="apiKey").to_dict()
