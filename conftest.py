import os

import click
import pytest

from aigateway_console.environment_variables import (
    AIGW_CONSOLE_KUBE_CONTEXT,
    AIGW_CONSOLE_KUBECONFIG,
)

_ENV_PREFIX = "AIGW_CONSOLE_"


def pytest_sessionstart(session):
    for env_var in (AIGW_CONSOLE_KUBECONFIG, AIGW_CONSOLE_KUBE_CONTEXT):
        if value := env_var.get():
            click.echo(
                click.style(
                    (
                        f"Environment variable {env_var} is set to {value!r}, "
                        "which may interfere with tests."
                    ),
                    fg="red",
                )
            )


@pytest.fixture(autouse=True)
def clean_console_env(monkeypatch):
    """
    Runs every test without console configuration inherited from the calling shell.
    """
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
