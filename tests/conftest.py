import pytest

from aigateway_console.service.llm_provider_service import LLMProviderService

from tests.helper_functions import FakeClientManager, load_provider_fixture


@pytest.fixture
def client_manager():
    return FakeClientManager()


@pytest.fixture
def service(client_manager):
    return LLMProviderService(client_manager)


@pytest.fixture
def openai_provider():
    return load_provider_fixture("openai")


@pytest.fixture
def aws_provider():
    return load_provider_fixture("aws")


@pytest.fixture
def azure_provider():
    return load_provider_fixture("azure")


@pytest.fixture
def gcp_provider():
    return load_provider_fixture("gcp")


@pytest.fixture
def gcp_legacy_provider():
    return load_provider_fixture("gcp_legacy")
