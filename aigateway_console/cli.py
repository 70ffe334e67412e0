import click
import yaml

from aigateway_console.environment_variables import (
    AIGW_CONSOLE_HOST,
    AIGW_CONSOLE_KUBE_CONTEXT,
    AIGW_CONSOLE_KUBECONFIG,
    AIGW_CONSOLE_PORT,
)
from aigateway_console.exceptions import ConsoleException
from aigateway_console.llm.provider import LLMProvider
from aigateway_console.llm.translate import to_envoy_gateway_resources
from aigateway_console.version import VERSION


def _load_provider(path):
    with open(path) as f:
        # JSON documents are valid YAML
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} does not contain a provider object", param_hint="--file")
    try:
        return LLMProvider.model_validate(data)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--file")


@click.group("aigw-console", help="Envoy AI Gateway console backend")
@click.version_option(VERSION)
def cli():
    pass


@cli.command("server", help="Start the console REST API server")
@click.option(
    "--host",
    envvar=AIGW_CONSOLE_HOST.name,
    default=AIGW_CONSOLE_HOST.default,
    help=f"The network address to listen on (default: {AIGW_CONSOLE_HOST.default}).",
)
@click.option(
    "--port",
    envvar=AIGW_CONSOLE_PORT.name,
    default=AIGW_CONSOLE_PORT.default,
    type=int,
    help=f"The port to listen on (default: {AIGW_CONSOLE_PORT.default}).",
)
@click.option(
    "--kubeconfig",
    envvar=AIGW_CONSOLE_KUBECONFIG.name,
    default=None,
    help="Path to the kubeconfig file. Defaults to the standard loading rules, then in-cluster "
    "configuration.",
)
@click.option(
    "--context",
    envvar=AIGW_CONSOLE_KUBE_CONTEXT.name,
    default=None,
    help="The kubeconfig context to use.",
)
def server(host: str, port: int, kubeconfig: str | None, context: str | None):
    import uvicorn

    # The app factory reads the connection settings from the environment
    if kubeconfig:
        AIGW_CONSOLE_KUBECONFIG.set(kubeconfig)
    if context:
        AIGW_CONSOLE_KUBE_CONTEXT.set(context)
    uvicorn.run(
        "aigateway_console.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port,
    )


@cli.command(
    "translate",
    help="Print the Kubernetes resources generated for an LLM provider as a YAML stream",
)
@click.option(
    "--file",
    "path",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to a JSON or YAML file containing the provider.",
)
def translate(path: str):
    provider = _load_provider(path)
    try:
        resources = to_envoy_gateway_resources(provider)
    except ConsoleException as e:
        raise click.ClickException(e.message)
    click.echo(
        yaml.safe_dump_all(
            [resource.to_dict() for resource in resources], sort_keys=False
        ),
        nl=False,
    )


if __name__ == "__main__":
    cli()
