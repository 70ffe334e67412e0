"""
The ``aigateway_console`` module exposes a simplified REST API for managing LLM providers on
Envoy AI Gateway. Each provider is stored as a set of Kubernetes resources: a Backend, a
BackendTLSPolicy, a BackendSecurityPolicy, an optional credential Secret and the
AIServiceBackend that binds them.
"""

from aigateway_console.environment_variables import AIGW_CONSOLE_CONFIGURE_LOGGING
from aigateway_console.utils.logging_utils import _configure_console_loggers
from aigateway_console.version import VERSION

__version__ = VERSION

if AIGW_CONSOLE_CONFIGURE_LOGGING.get() is True:
    _configure_console_loggers(root_module_name=__name__)

__all__ = ["__version__"]
