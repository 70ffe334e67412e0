KIND_BACKEND = "Backend"
KIND_BACKEND_TLS_POLICY = "BackendTLSPolicy"
KIND_BACKEND_SECURITY_POLICY = "BackendSecurityPolicy"
KIND_AI_SERVICE_BACKEND = "AIServiceBackend"
KIND_SECRET = "Secret"

API_VERSION_GATEWAY_V1ALPHA1 = "gateway.envoyproxy.io/v1alpha1"
API_VERSION_GATEWAY_V1ALPHA3 = "gateway.envoyproxy.io/v1alpha3"
API_VERSION_AIGATEWAY_V1ALPHA1 = "aigateway.envoyproxy.io/v1alpha1"
API_VERSION_V1 = "v1"

GROUP_GATEWAY_ENVOY_PROXY = "gateway.envoyproxy.io"
GROUP_AIGATEWAY_ENVOY_PROXY = "aigateway.envoyproxy.io"
GROUP_GATEWAY_NETWORKING = "gateway.networking.k8s.io"

# Keys inside the synthesized credential Secret
KEY_API_KEY = "apiKey"
KEY_ACCESS_KEY_ID = "accessKeyId"
KEY_SECRET_ACCESS_KEY = "secretAccessKey"
KEY_CLIENT_SECRET = "client-secret"

SECRET_TYPE_OPAQUE = "Opaque"

# Marks the credential Secrets synthesized for a provider, as opposed to ones supplied through
# secretRef
LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"
MANAGED_BY_CONSOLE = "aigateway-console"

# Discriminant values of BackendSecurityPolicy.spec.type
SECURITY_POLICY_TYPE_API_KEY = "APIKey"
SECURITY_POLICY_TYPE_AWS_CREDENTIALS = "AWSCredentials"
SECURITY_POLICY_TYPE_AZURE_CREDENTIALS = "AzureCredentials"
SECURITY_POLICY_TYPE_GCP_CREDENTIALS = "GCPCredentials"
