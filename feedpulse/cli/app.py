"""Main CLI application."""

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .init import init_command  # noqa: E402
from .run import prune_command, run_command, serve_command  # noqa: E402
from .sources import sources_app  # noqa: E402

app = typer.Typer(
    name="feedpulse",
    help="feedpulse - RSS/Atom ingestion with source health tracking",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        envvar="FEEDPULSE_CONFIG",
        help="Path to config.yaml (default: ~/.config/feedpulse/config.yaml)",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level"),
) -> None:
    """Global options."""
    ctx.obj = {"config_path": config_path, "log_level": log_level}


# Register commands
app.command("init")(init_command)
app.command("run")(run_command)
app.command("serve")(serve_command)
app.command("prune")(prune_command)
app.add_typer(sources_app, name="sources", help="Manage RSS sources")


if __name__ == "__main__":
    app()
