import asyncio
import json

import click

from . import __version__


def get_version():
    return __version__


async def _probe_models():
    from marketmind_ai.config.settings import get_settings
    from marketmind_ai.orchestrator.health_monitor import HealthMonitor
    from marketmind_ai.orchestrator.registry import ModelRegistry
    from marketmind_ai.server.main import _build_provider

    settings = get_settings()
    provider = _build_provider(settings)
    try:
        monitor = HealthMonitor(provider, ModelRegistry.from_settings(settings))
        await monitor.probe_all()
        return monitor.get_model_health()
    finally:
        await provider.close()


@click.group()
def cli():
    pass


@cli.command()
@click.option("--format", default="text", type=click.Choice(["text", "json"]))
def version(format):
    if format == "json":
        click.echo(json.dumps({"version": get_version()}))
    else:
        click.echo(f"v{get_version()}")


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST)")
@click.option("--port", default=None, type=int, help="Bind port (defaults to PORT)")
@click.option("--reload", is_flag=True)
def serve(host, port, reload):
    from marketmind_ai.server.main import start_server

    start_server(host, port, reload)


@cli.command("probe-models")
def probe_models():
    """Probe every configured model once and print the health table."""
    from marketmind_ai.telemetry.logger import setup_logging

    setup_logging(level="WARNING", format="console")
    view = asyncio.run(_probe_models())
    click.echo(view.model_dump_json(indent=2))
    if not view.available_models:
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
