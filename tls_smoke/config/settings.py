"""
Application Settings
===================

Smoke test settings and environment configuration using Pydantic Settings.
Every value can be overridden with a ``TLS_SMOKE_`` prefixed environment
variable or a ``.env`` file.
"""

from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
from pathlib import Path

from tls_smoke.models.schemas import CompressionPolicy, LaunchConfiguration


DEFAULT_FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"


class Settings(BaseSettings):
    """Smoke test settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="TLS Smoke Test", description="Application name")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )

    # Server Configuration
    server_host: str = Field(default="0.0.0.0", description="Test server bind address")
    server_port: int = Field(
        default=3333, ge=0, le=65535, description="Test server port, 0 picks a free port"
    )
    public_host: str = Field(default="localhost", description="Host name the browser navigates to")
    fixtures_dir: Path = Field(
        default=DEFAULT_FIXTURES_DIR, description="Directory holding index.html and index.js"
    )
    compression_policy: CompressionPolicy = Field(
        default=CompressionPolicy.ALWAYS, description="Brotli policy for the script route"
    )
    brotli_quality: int = Field(default=11, ge=0, le=11, description="Brotli compression quality")
    shutdown_timeout: Optional[int] = Field(
        default=5, description="Seconds to wait for open connections on shutdown"
    )

    # Browser Configuration
    run_headful: bool = Field(default=True, description="Run the scenario in a headful browser")
    run_headless: bool = Field(default=True, description="Run the scenario in a headless browser")
    launch_args: List[str] = Field(
        default=["--allow-insecure-localhost"], description="Extra browser launch arguments"
    )
    ignore_https_errors: bool = Field(
        default=True, description="Let pages accept the self-signed certificate"
    )
    playwright_timeout: int = Field(default=30000, description="Navigation timeout in milliseconds")

    # Scenario Configuration
    expected_html: str = Field(default="<h1>It works</h1>", description="Expected body markup")
    fail_on_mismatch: bool = Field(
        default=False, description="Exit non-zero when the rendered markup does not match"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log renderer: console or json")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"console", "json"}
        if v.lower() not in allowed:
            raise ValueError(f"Log format must be one of: {allowed}")
        return v.lower()

    @field_validator("launch_args", mode="before")
    @classmethod
    def parse_launch_args(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse launch arguments from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string: ["--flag"] or ["--a", "--b"]
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Handle comma-separated string: "--a,--b"
            return [arg.strip() for arg in v.split(",") if arg.strip()]
        return v

    def launch_configurations(self) -> List[LaunchConfiguration]:
        """Ordered launch configurations: headful first, then headless."""
        configurations = []
        if self.run_headful:
            configurations.append(
                LaunchConfiguration(headless=False, args=tuple(self.launch_args))
            )
        if self.run_headless:
            configurations.append(LaunchConfiguration(headless=True, args=tuple(self.launch_args)))
        return configurations

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="TLS_SMOKE_"
    )


def build_target_url(host: str, port: int) -> str:
    return f"https://{host}:{port}/"


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings
