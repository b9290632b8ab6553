"""
Configuration module for the Zendesk MCP Server.

Handles all configuration through environment variables.
Credentials are never stored directly in code.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()


@dataclass(frozen=True)
class ZendeskConfig:
    """Connection settings for the Zendesk REST API."""

    subdomain: str = field(
        default_factory=lambda: os.getenv("ZENDESK_SUBDOMAIN", "")
    )
    email: str = field(
        default_factory=lambda: os.getenv("ZENDESK_EMAIL", "")
    )
    api_token: str = field(
        default_factory=lambda: os.getenv("ZENDESK_API_TOKEN", "")
    )

    # Socket timeout in seconds
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("ZENDESK_REQUEST_TIMEOUT", "30"))
    )

    @property
    def base_url(self) -> str:
        """Root of the versioned REST API for this tenant."""
        return f"https://{self.subdomain}.zendesk.com/api/v2"

    @property
    def auth_username(self) -> str:
        """Basic auth username for API token authentication."""
        return f"{self.email}/token"


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    zendesk: ZendeskConfig = field(default_factory=ZendeskConfig)

    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )

    # Identity announced to MCP clients
    server_name: str = field(
        default_factory=lambda: os.getenv("MCP_SERVER_NAME", "zendesk-server")
    )

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors = []

        if not self.zendesk.subdomain:
            errors.append("ZENDESK_SUBDOMAIN is required")
        if not self.zendesk.email:
            errors.append("ZENDESK_EMAIL is required")
        if not self.zendesk.api_token:
            errors.append("ZENDESK_API_TOKEN is required")

        return errors


def get_config() -> AppConfig:
    """
    Get application configuration.

    Returns:
        AppConfig instance with all settings loaded from environment.
    """
    return AppConfig()
