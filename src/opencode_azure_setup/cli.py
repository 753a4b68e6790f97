import asyncio
import functools
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click

from opencode_azure_setup.config.base import LoggingConfig, SetupSettings
from opencode_azure_setup.config.store import ConfigStore
from opencode_azure_setup.core.exceptions import SetupError
from opencode_azure_setup.core.orchestrator import SetupOrchestrator
from opencode_azure_setup.core.prompts import ClickPromptIO, Tone
from opencode_azure_setup.core.session import SetupSession
from opencode_azure_setup.installers import default_tasks

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
RULE = "─" * 40


def coro(f):
    """Turn an async function into a regular function."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def configure_logging(config: LoggingConfig) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))
    logging.basicConfig(level=config.level.upper(), format=LOG_FORMAT, handlers=handlers)


def load_settings(
    settings_file: Optional[Path],
    config_path: Optional[Path],
    skip_extras: bool,
    log_level: Optional[str],
) -> SetupSettings:
    """Settings from a YAML file if given, else the environment, then CLI overrides."""
    settings = SetupSettings.from_yaml(settings_file) if settings_file else SetupSettings.from_env()
    if config_path is not None:
        settings.config_path = config_path
    if skip_extras:
        settings.installers.enabled = False
    if log_level:
        settings.logging.level = log_level.upper()
    return settings


@click.group(invoke_without_command=True)
@click.option(
    "-y",
    "--yes",
    "--non-interactive",
    "unattended",
    is_flag=True,
    help="Use the existing configuration without prompting",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="OpenCode config file (default: ~/.config/opencode/opencode.json)",
)
@click.option(
    "--settings",
    "settings_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with installer settings",
)
@click.option("--skip-extras", is_flag=True, help="Do not install the MCP marketplace or the opencode binary")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Diagnostic log level (logs go to stderr)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    unattended: bool,
    config_path: Optional[Path],
    settings_file: Optional[Path],
    skip_extras: bool,
    log_level: Optional[str],
):
    """Configure OpenCode to use an Azure OpenAI deployment"""
    settings = load_settings(settings_file, config_path, skip_extras, log_level)
    configure_logging(settings.logging)
    ctx.obj = {"settings": settings, "unattended": unattended}

    if ctx.invoked_subcommand is None:
        ctx.invoke(setup)


@cli.command()
@click.pass_obj
@coro
async def setup(obj: dict):
    """Run the interactive setup (default command)"""
    settings: SetupSettings = obj["settings"]
    io = ClickPromptIO()

    io.show("Azure OpenAI Setup", Tone.INFO)
    io.show(RULE)
    io.show()

    try:
        with SetupSession(io=io, settings=settings, unattended=obj["unattended"]) as session:
            orchestrator = SetupOrchestrator(session, tasks=default_tasks(settings.installers))
            await orchestrator.run()
    except SetupError as e:
        io.show(str(e), Tone.ERROR)
        raise click.exceptions.Exit(1)

    io.show()
    io.show(RULE)
    io.show("You're all set! Run:", Tone.SUCCESS)
    io.show()
    io.show("    " + click.style("opencode", fg="blue"))
    io.show()


@cli.command()
@click.pass_obj
def show(obj: dict):
    """Show the stored Azure configuration"""
    settings: SetupSettings = obj["settings"]
    store = ConfigStore(settings.config_path)
    stored = store.extract_provider_settings(store.load())

    if stored is None or not stored.has_endpoint:
        click.echo(click.style(f"No Azure configuration found in {settings.config_path}", fg="red"), err=True)
        raise click.exceptions.Exit(1)

    # Mask API key
    config_dict = stored.model_dump()
    config_dict["api_key"] = stored.credential.redacted() if stored.credential else ""

    click.echo(json.dumps(config_dict, indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
