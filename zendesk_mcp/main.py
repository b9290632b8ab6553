"""
Main entry point for the Zendesk MCP Server.

Loads configuration, refuses to start when credentials are missing,
and serves the tool catalog over stdio.
"""

import logging
import sys
from dataclasses import replace

import click

from .config import AppConfig, get_config
from .server import run_server


def setup_logging(level: str) -> None:
    """
    Configure application logging.

    Logs go to stderr because stdout carries the MCP protocol.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Required configuration is missing or invalid."""
    pass


def validate_config(config: AppConfig) -> None:
    """
    Validate configuration before serving.

    Args:
        config: Application configuration.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        raise ConfigurationError(
            "Missing required environment variables. "
            "Please set: ZENDESK_SUBDOMAIN, ZENDESK_EMAIL, ZENDESK_API_TOKEN"
        )


@click.command()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug logging",
)
@click.option(
    "--validate-only",
    is_flag=True,
    default=False,
    help="Only validate configuration without starting the server",
)
def main(debug: bool, validate_only: bool) -> None:
    """
    Zendesk MCP Server.

    Provides tools for searching and reading Zendesk support tickets
    and Help Center articles over the Model Context Protocol (stdio).
    """
    try:
        config = get_config()
        if debug:
            config = replace(config, log_level="DEBUG")

        setup_logging(config.log_level)
        validate_config(config)

        if validate_only:
            logger.info("Configuration is valid!")
            return

        run_server(config)

    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nServer stopped by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        if debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
