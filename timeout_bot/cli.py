import logging
from pathlib import Path
from typing import Optional

import typer
import yaml

from config.settings import settings

from .core.bot import TimeoutBot
from .errors import StorageError
from .storage import ConfigStore

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="timeout-bot",
    help="Discord bot that confines timed-out members to one channel",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def load_store(config_path: Optional[Path]) -> ConfigStore:
    """Load the configuration file or exit with status 1 when it is unusable."""
    store = ConfigStore(config_path or settings.config_path)
    try:
        store.load()
    except StorageError as e:
        logger.critical(f"Fatal configuration error: {e}")
        typer.echo(f"❌ Fatal configuration error: {e}", err=True)
        raise typer.Exit(code=1)
    return store


@app.command()
def run(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Set log level"),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Path of the configuration file"
    ),
) -> None:
    """Run the Discord bot."""
    setup_logging(log_level or settings.log_level)

    # The gateway session is only opened once the configuration is known to be sane
    store = load_store(config)

    token = settings.discord_token or store.config.legacy_token
    if not token:
        logger.critical("No Discord token configured (set DISCORD_TOKEN)")
        typer.echo(
            "❌ No Discord token configured. Set DISCORD_TOKEN in the environment",
            err=True,
        )
        raise typer.Exit(code=1)

    bot = TimeoutBot(store, token)
    bot.run()


@app.command()
def init(
    directory: Optional[str] = typer.Option(None, help="Directory to initialize"),
) -> None:
    """Create a starter .env and configuration file."""
    target_dir = Path(directory) if directory else Path.cwd()

    if not target_dir.exists():
        target_dir.mkdir(parents=True)

    env_file = target_dir / ".env"
    if not env_file.exists():
        env_content = """# Discord Bot Configuration
DISCORD_TOKEN=your_discord_bot_token_here
CONFIG_PATH=config.yml
ENVIRONMENT=development
LOG_LEVEL=INFO
"""
        env_file.write_text(env_content)

    config_file = target_dir / "config.yml"
    if config_file.exists():
        typer.echo(f"ℹ️  Keeping existing {config_file}")
    else:
        load_store(config_file)

    typer.echo(f"✅ Bot project initialized in {target_dir}")


@app.command("show-config")
def show_config(
    config: Optional[Path] = typer.Option(
        None, "--config", help="Path of the configuration file"
    ),
) -> None:
    """Print the effective moderation configuration."""
    store = load_store(config)
    document = store.config.to_document()
    # Never echo a token kept in the file
    document["bot"].pop("token", None)
    typer.echo(yaml.safe_dump(document, sort_keys=False), nl=False)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
