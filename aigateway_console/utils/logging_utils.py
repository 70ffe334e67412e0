import logging
import logging.config
import sys

from aigateway_console.environment_variables import AIGW_CONSOLE_LOGGING_LEVEL

# Logging format example:
# 2025/06/20 12:36:37 INFO aigateway_console.service.llm_provider_service: Created Backend
LOGGING_LINE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOGGING_DATETIME_FORMAT = "%Y/%m/%d %H:%M:%S"


class ConsoleLoggingStream:
    """
    A Python stream for use with event logging APIs throughout the console backend. This stream
    wraps `sys.stderr`, forwarding `write()` and `flush()` calls to the stream referred to by
    `sys.stderr` at the time of the call. It also provides capabilities for disabling the stream
    to silence event logs.
    """

    def __init__(self):
        self._enabled = True

    def write(self, text):
        if self._enabled:
            sys.stderr.write(text)

    def flush(self):
        if self._enabled:
            sys.stderr.flush()

    @property
    def enabled(self):
        return self._enabled

    @enabled.setter
    def enabled(self, value):
        self._enabled = value


CONSOLE_LOGGING_STREAM = ConsoleLoggingStream()


def disable_logging():
    """
    Disables the `ConsoleLoggingStream`, silencing all subsequent event logs.
    """
    CONSOLE_LOGGING_STREAM.enabled = False


def enable_logging():
    """
    Enables the `ConsoleLoggingStream`, emitting all subsequent event logs. This reverses the
    effects of `disable_logging()`.
    """
    CONSOLE_LOGGING_STREAM.enabled = True


def _configure_console_loggers(root_module_name):
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console_formatter": {
                    "format": LOGGING_LINE_FORMAT,
                    "datefmt": LOGGING_DATETIME_FORMAT,
                },
            },
            "handlers": {
                "console_handler": {
                    "formatter": "console_formatter",
                    "class": "logging.StreamHandler",
                    "stream": CONSOLE_LOGGING_STREAM,
                },
            },
            "loggers": {
                root_module_name: {
                    "handlers": ["console_handler"],
                    "level": (AIGW_CONSOLE_LOGGING_LEVEL.get() or "INFO").upper(),
                    "propagate": False,
                },
                "kubernetes.client.rest": {
                    "handlers": ["console_handler"],
                    "level": "WARN",
                    "propagate": False,
                },
            },
        }
    )
