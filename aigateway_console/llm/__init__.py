from aigateway_console.llm.masking import MASKED_SECRET_VALUE, mask_secret
from aigateway_console.llm.provider import (
    APISchema,
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

__all__ = [
    "APISchema",
    "AWSAuth",
    "AuthConfig",
    "AuthType",
    "AzureAuth",
    "Backend",
    "GCPAuth",
    "LLMProvider",
    "MASKED_SECRET_VALUE",
    "SecretRef",
    "TLSValidation",
    "mask_secret",
]
