"""
Redaction of credential material before provider configurations leave the service.

Only inline credentials are sensitive: literal API keys (generic and Azure), AWS access key
id and secret access key, the GCP OIDC client secret and the legacy GCP private key. Everything
else, including references to Secrets by name and namespace, is returned unchanged.
"""

MASKED_SECRET_VALUE = "********"


def mask_value(value):
    """
    Returns the sentinel for a non-empty value and the value itself (empty string or None)
    otherwise, so that empty credentials stay recognizably empty.
    """
    return MASKED_SECRET_VALUE if value else value


def mask_secret(obj):
    """
    Returns a deep copy of ``obj`` with every sensitive field replaced by
    ``MASKED_SECRET_VALUE``. ``obj`` may be an ``LLMProvider``, ``AuthConfig``, ``AWSAuth``,
    ``GCPAuth`` or ``AzureAuth``; ``None`` yields ``None``. The input is never modified.
    """
    if obj is None:
        return None
    return obj.mask_secret()
