import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from aigateway_console.environment_variables import (
    AIGW_CONSOLE_CORS_ALLOW_ORIGINS,
    AIGW_CONSOLE_DEFAULT_NAMESPACE,
    AIGW_CONSOLE_HEALTH_CHECK_TIMEOUT,
)
from aigateway_console.exceptions import (
    INVALID_PARAMETER_VALUE,
    TEMPORARILY_UNAVAILABLE,
    ConsoleException,
)
from aigateway_console.llm.provider import LLMProvider
from aigateway_console.server.constants import (
    AIGW_CONSOLE_CORS_ALLOW_HEADERS,
    AIGW_CONSOLE_CORS_ALLOW_METHODS,
    AIGW_CONSOLE_HEALTH_ENDPOINT,
    AIGW_CONSOLE_PROVIDERS_BASE,
)
from aigateway_console.service.llm_provider_service import LLMProviderService
from aigateway_console.store.manager import ClientManager
from aigateway_console.version import VERSION

_logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str


class DeleteResponse(BaseModel):
    message: str


class ConsoleAPI(FastAPI):
    def __init__(self, service: LLMProviderService, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service = service
        self.add_exception_handler(ConsoleException, _console_exception_handler)
        self.add_exception_handler(RequestValidationError, _request_validation_handler)


def _console_exception_handler(request: Request, exc: ConsoleException) -> JSONResponse:
    return JSONResponse(status_code=exc.get_http_status_code(), content=exc.to_dict())


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = "; ".join(
        f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error_code": INVALID_PARAMETER_VALUE, "message": f"Invalid request: {errors}"},
    )


def _cors_origins() -> list[str]:
    origins = AIGW_CONSOLE_CORS_ALLOW_ORIGINS.get().split(",")
    return [origin.strip() for origin in origins if origin.strip()]


def create_app(service: LLMProviderService) -> ConsoleAPI:
    """
    Create the console API app around ``service``.
    """
    app = ConsoleAPI(
        service=service,
        title="Envoy AI Gateway Console",
        description="Manage LLM providers backed by Envoy AI Gateway resources",
        version=VERSION,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_methods=AIGW_CONSOLE_CORS_ALLOW_METHODS,
        allow_headers=AIGW_CONSOLE_CORS_ALLOW_HEADERS,
    )

    @app.get(AIGW_CONSOLE_HEALTH_ENDPOINT)
    def health() -> HealthResponse:
        try:
            app.service.health_check(AIGW_CONSOLE_HEALTH_CHECK_TIMEOUT.get())
        except Exception as e:
            _logger.warning("Health check failed: %s", e)
            raise ConsoleException(
                f"Health check failed: {e}", error_code=TEMPORARILY_UNAVAILABLE
            ) from e
        return HealthResponse(status="healthy")

    @app.get(AIGW_CONSOLE_PROVIDERS_BASE)
    def list_providers(namespace: str | None = None) -> JSONResponse:
        namespace = namespace or AIGW_CONSOLE_DEFAULT_NAMESPACE.get()
        _logger.debug("Listing LLM providers in namespace %s", namespace)
        providers = app.service.list_providers(namespace)
        return JSONResponse(content=[provider.to_dict() for provider in providers])

    @app.get(AIGW_CONSOLE_PROVIDERS_BASE + "/{name}")
    def get_provider(name: str, namespace: str | None = None) -> JSONResponse:
        namespace = namespace or AIGW_CONSOLE_DEFAULT_NAMESPACE.get()
        provider = app.service.get_provider(namespace, name)
        return JSONResponse(content=provider.to_dict())

    @app.post(AIGW_CONSOLE_PROVIDERS_BASE, status_code=201)
    def create_provider(provider: LLMProvider) -> JSONResponse:
        created = app.service.create_provider(provider)
        return JSONResponse(status_code=201, content=created.to_dict())

    @app.delete(AIGW_CONSOLE_PROVIDERS_BASE + "/{name}")
    def delete_provider(name: str, namespace: str | None = None) -> DeleteResponse:
        namespace = namespace or AIGW_CONSOLE_DEFAULT_NAMESPACE.get()
        app.service.delete_provider(namespace, name)
        return DeleteResponse(message=f"Provider '{name}' deleted successfully")

    return app


def create_app_from_env() -> ConsoleAPI:
    """
    Connect to Kubernetes using the configured kubeconfig and context and generate the app.
    """
    return create_app(LLMProviderService(ClientManager()))
