AIGW_CONSOLE_HEALTH_ENDPOINT = "/health"
AIGW_CONSOLE_API_BASE = "/api/v1"
AIGW_CONSOLE_PROVIDERS_BASE = f"{AIGW_CONSOLE_API_BASE}/llm/providers"

AIGW_CONSOLE_CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
AIGW_CONSOLE_CORS_ALLOW_HEADERS = ["Origin", "Content-Type", "Accept", "Authorization"]
