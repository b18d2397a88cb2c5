import logging
import os
import sys
from typing import Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

log = structlog.get_logger()

ENV_DOMAIN = "DDNS_DOMAIN"
ENV_SERVER = "DDNS_SERVER"
ENV_TTL = "DDNS_TTL"
ENV_NSUPDATE_COMMAND = "NSUPDATE_COMMAND"
ENV_NSUPDATE_KEY_FILE = "NSUPDATE_KEY_FILE"
ENV_NSUPDATE_TIMEOUT = "NSUPDATE_TIMEOUT"
ENV_LOG_LEVEL = "LOG_LEVEL"

DEFAULT_SERVER = "127.0.0.1"
DEFAULT_TTL = 3600
DEFAULT_NSUPDATE_COMMAND = "nsupdate"
DEFAULT_NSUPDATE_TIMEOUT = 60

PLACEHOLDER_DOMAINS = ["YOUR_DOMAIN", "YOURDOMAIN.LOCAL", "EXAMPLE.INVALID"]


class PipelineConfig(BaseModel):
    """Immutable settings for one run: where records go and which directives to emit."""

    model_config = ConfigDict(frozen=True)

    domain: str = Field(..., min_length=1)
    server: str = DEFAULT_SERVER
    ttl: int = Field(DEFAULT_TTL, ge=0)
    forward: bool = True
    reverse: bool = True
    delete_before_add: bool = True
    remove: bool = False
    show: bool = False
    drop_suffix: bool = True
    nsupdate_command: str = DEFAULT_NSUPDATE_COMMAND
    key_file: Optional[str] = None
    nsupdate_timeout: int = Field(DEFAULT_NSUPDATE_TIMEOUT, gt=0)

    @field_validator("domain")
    @classmethod
    def _strip_domain_dots(cls, value):
        value = value.strip().strip(".")
        if not value:
            raise ValueError("domain must not be empty")
        return value

    @property
    def mode(self) -> str:
        return "remove" if self.remove else "add"


def _int_from_env(var_name, default):
    raw = os.getenv(var_name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning(
            f"Invalid value for {var_name}, using default",
            invalid_value=raw,
            default_value=default,
        )
        return default


class ConfigError(ValueError):
    pass


def build_config(**overrides):
    """
    Builds the pipeline configuration from environment variables.

    Keyword overrides (for example values given on the command line) take
    precedence over the environment; None values are ignored.

    Raises:
        ConfigError: the domain is missing, looks like a placeholder, or the
            resulting configuration does not validate.
    """
    values = {
        "domain": os.getenv(ENV_DOMAIN),
        "server": os.getenv(ENV_SERVER) or DEFAULT_SERVER,
        "ttl": _int_from_env(ENV_TTL, DEFAULT_TTL),
        "nsupdate_command": os.getenv(ENV_NSUPDATE_COMMAND) or DEFAULT_NSUPDATE_COMMAND,
        "key_file": os.getenv(ENV_NSUPDATE_KEY_FILE) or None,
        "nsupdate_timeout": _int_from_env(ENV_NSUPDATE_TIMEOUT, DEFAULT_NSUPDATE_TIMEOUT),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    if not values["domain"]:
        raise ConfigError(f"Missing mandatory domain ({ENV_DOMAIN})")
    if values["domain"].strip(".").upper() in PLACEHOLDER_DOMAINS:
        raise ConfigError(f"Placeholder value detected for {ENV_DOMAIN}: {values['domain']}")

    try:
        config = PipelineConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    log.debug("Loaded configuration", domain=config.domain, server=config.server, ttl=config.ttl)
    return config


def load_config_from_env(**overrides):
    """Like build_config, but logs the problem and exits when the configuration is unusable."""
    try:
        return build_config(**overrides)
    except ConfigError as e:
        log.error("Cannot load configuration", error=str(e))
        sys.exit(1)


def configure_logging(level=None):
    """Sends structlog output to stderr so stdout stays free for the directive script."""
    level_name = (level or os.getenv(ENV_LOG_LEVEL) or "INFO").upper()
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
