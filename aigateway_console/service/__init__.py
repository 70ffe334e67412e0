from aigateway_console.service.llm_provider_service import LLMProviderService
from aigateway_console.service.loader import load_provider_resources

__all__ = ["LLMProviderService", "load_provider_resources"]
