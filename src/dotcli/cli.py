"""Process entry point.

``dotcli sys.info`` runs one command and exits; ``dotcli repl`` starts an
interactive session; ``dotcli`` alone prints the banner and usage.
"""

from __future__ import annotations

import sys
from typing import Iterable, List, Optional, Sequence

import click

from .app import CliApp
from .configurator import Configurator
from .errors import DotCliError
from .logging_config import configure_logging
from .settings import AppSettings
from .settings_store import SettingsStore



def build_app(configurators: Optional[Iterable[Configurator]] = None, settings: Optional[AppSettings] = None) -> CliApp:
    settings = settings or AppSettings()
    return CliApp(
        configurators,
        settings_store=SettingsStore(settings.settings_file),
        help_width=settings.help_width,
    )


def main(argv: Optional[Sequence[str]] = None, configurators: Optional[Iterable[Configurator]] = None) -> int:
    """Run one invocation and return the process exit code."""
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    try:
        settings = AppSettings()
        configure_logging(settings.log_level, settings.log_format)
        app = build_app(configurators, settings)
    except (DotCliError, ValueError) as exc:
        # pydantic's ValidationError is a ValueError
        click.echo(f"error: startup failed: {exc}", err=True)
        return 1

    try:
        if not args:
            for line in app.intro():
                click.echo(line)
            click.echo()
        output = app.run(args)
        if output:
            click.echo(output)
    finally:
        app.close()
    return 0


def run() -> None:
    sys.exit(main())
