"""
This module defines environment variables used by the AI Gateway console backend.
All variable names begin with `AIGW_CONSOLE_`.
"""

import os


class _EnvironmentVariable:
    """
    Represents an environment variable.
    """

    def __init__(self, name, type_, default):
        if type_ == bool and not isinstance(self, _BooleanEnvironmentVariable):
            raise ValueError("Use _BooleanEnvironmentVariable instead for boolean variables")
        self.name = name
        self.type = type_
        self.default = default

    @property
    def defined(self):
        return self.name in os.environ

    def get_raw(self):
        return os.getenv(self.name)

    def set(self, value):
        os.environ[self.name] = str(value)

    def unset(self):
        os.environ.pop(self.name, None)

    def get(self):
        """
        Reads the value of the environment variable if it exists and converts it to the desired
        type. Otherwise, returns the default value.
        """
        if (val := self.get_raw()) is not None:
            try:
                return self.type(val)
            except Exception as e:
                raise ValueError(f"Failed to convert {val!r} for {self.name}: {e}")
        return self.default

    def __str__(self):
        return f"{self.name} (default: {self.default})"

    def __repr__(self):
        return repr(self.name)

    def __format__(self, format_spec: str) -> str:
        return self.name.__format__(format_spec)


class _BooleanEnvironmentVariable(_EnvironmentVariable):
    """
    Represents a boolean environment variable.
    """

    def __init__(self, name, default):
        # `default not in [True, False, None]` doesn't work because `1 in [True]`
        # (or `0 in [False]`) returns True.
        if not (default is True or default is False or default is None):
            raise ValueError(f"{name} default value must be one of [True, False, None]")
        super().__init__(name, bool, default)

    def get(self):
        if not self.defined:
            return self.default

        val = os.getenv(self.name)
        lowercased = val.lower()
        if lowercased not in ["true", "false", "1", "0"]:
            raise ValueError(
                f"{self.name} value must be one of ['true', 'false', '1', '0'] (case-insensitive), "
                f"but got {val}"
            )
        return lowercased in ["true", "1"]


#: Specifies the path to the kubeconfig file used to reach the cluster. When unset, the default
#: kubeconfig loading rules apply and the in-cluster configuration is used as a fallback.
#: (default: ``None``)
AIGW_CONSOLE_KUBECONFIG = _EnvironmentVariable("AIGW_CONSOLE_KUBECONFIG", str, None)

#: Specifies the kubeconfig context to use.
#: (default: ``None``)
AIGW_CONSOLE_KUBE_CONTEXT = _EnvironmentVariable("AIGW_CONSOLE_KUBE_CONTEXT", str, None)

#: Specifies the network address the console server listens on.
#: (default: ``0.0.0.0``)
AIGW_CONSOLE_HOST = _EnvironmentVariable("AIGW_CONSOLE_HOST", str, "0.0.0.0")

#: Specifies the port the console server listens on.
#: (default: ``8081``)
AIGW_CONSOLE_PORT = _EnvironmentVariable("AIGW_CONSOLE_PORT", int, 8081)

#: Specifies the namespace used when a request does not name one.
#: (default: ``default``)
AIGW_CONSOLE_DEFAULT_NAMESPACE = _EnvironmentVariable(
    "AIGW_CONSOLE_DEFAULT_NAMESPACE", str, "default"
)

#: Specifies the timeout (in seconds) for health-check calls against the Kubernetes API.
#: (default: ``5``)
AIGW_CONSOLE_HEALTH_CHECK_TIMEOUT = _EnvironmentVariable(
    "AIGW_CONSOLE_HEALTH_CHECK_TIMEOUT", int, 5
)

#: Specifies the timeout (in seconds) for every other call against the Kubernetes API.
#: (default: ``30``)
AIGW_CONSOLE_REQUEST_TIMEOUT = _EnvironmentVariable("AIGW_CONSOLE_REQUEST_TIMEOUT", int, 30)

#: Specifies the comma-separated list of origins allowed by the CORS middleware.
#: (default: ``*``)
AIGW_CONSOLE_CORS_ALLOW_ORIGINS = _EnvironmentVariable(
    "AIGW_CONSOLE_CORS_ALLOW_ORIGINS", str, "*"
)

#: Specifies the logging level of the ``aigateway_console`` logger.
#: (default: ``None``, which means ``INFO``)
AIGW_CONSOLE_LOGGING_LEVEL = _EnvironmentVariable("AIGW_CONSOLE_LOGGING_LEVEL", str, None)

#: Specifies whether to configure the ``aigateway_console`` logger on import.
#: (default: ``True``)
AIGW_CONSOLE_CONFIGURE_LOGGING = _BooleanEnvironmentVariable(
    "AIGW_CONSOLE_CONFIGURE_LOGGING", True
)
