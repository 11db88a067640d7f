"""Runtime configuration for the inspection sync layer.

Reads remote-service and sync settings from CLI args, environment
variables, .env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    INSPECTION_API_URL: Remote service base URL (optional; required for uploads)
    INSPECTION_API_TOKEN: Bearer token for the remote service (optional)
    INSPECTION_INSECURE: Skip SSL verification (optional, default: false)
    INSPECTION_TIMEOUT: Read timeout in seconds (optional, default: 60)
    INSPECTION_SAMPLE_DATA: Seed the repository with sample projects (default: false)
    INSPECTION_ANALYTICS: Event sink, one of console, log, none (default: log)
    INSPECTION_SERIALIZE_UPLOADS: Serialize uploads per project id (default: true)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ANALYTICS_KINDS = ("console", "log", "none")


@dataclass
class Config:
    api_url: str = ""
    api_token: str = ""
    insecure: bool = False
    debug: bool = False
    timeout: int = 60
    sample_data: bool = False
    analytics: str = "log"
    serialize_uploads: bool = True


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    An empty ``api_url`` is accepted: the repository works offline and only
    ``RestApiClient`` needs a URL.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If URL format, timeout or analytics kind is invalid.
    """
    config.api_url = config.api_url.strip()

    if config.api_url:
        if not config.api_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid API URL '{config.api_url}': must start with http:// or https://"
            )
        parsed = urlparse(config.api_url)
        if not parsed.hostname:
            raise ValueError(
                f"Invalid API URL '{config.api_url}': URL must include a hostname"
            )
        config.api_url = config.api_url.removesuffix("/")

    if not (1 <= config.timeout <= 600):
        raise ValueError(
            f"Invalid timeout '{config.timeout}': must be a number between 1 and 600"
        )

    if config.analytics not in ANALYTICS_KINDS:
        raise ValueError(
            f"Invalid analytics sink '{config.analytics}': "
            f"must be one of {', '.join(ANALYTICS_KINDS)}"
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def _resolve_bool(cli_value: bool, env_key: str, fallback) -> bool:
    if cli_value:
        return True
    env_value = _get_bool_env(env_key)
    if env_value is not None:
        return env_value
    return bool(fallback)


def load_config(
    url: str | None = None,
    token: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    sample_data: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        url: Override remote service URL.
        token: Override bearer token.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        sample_data: Seed sample projects (CLI flag).
        yaml_fallbacks: Flat dict of values from the YAML ``remote`` and
            ``sync`` sections, used when CLI arg and env var are unset.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If a value is malformed.
    """
    fb = yaml_fallbacks or {}

    api_url = url or os.getenv("INSPECTION_API_URL") or fb.get("url") or ""
    api_token = (
        token or os.getenv("INSPECTION_API_TOKEN") or fb.get("token") or ""
    )

    timeout_raw = os.getenv("INSPECTION_TIMEOUT")
    if timeout_raw is not None:
        try:
            final_timeout = int(timeout_raw)
        except ValueError:
            raise ValueError(
                f"Invalid INSPECTION_TIMEOUT '{timeout_raw}': must be a number between 1 and 600"
            ) from None
    elif "timeout" in fb:
        final_timeout = int(fb["timeout"])
    else:
        final_timeout = 60

    analytics = (
        os.getenv("INSPECTION_ANALYTICS") or fb.get("analytics") or "log"
    ).lower()

    serialize_env = _get_bool_env("INSPECTION_SERIALIZE_UPLOADS")
    if serialize_env is not None:
        serialize_uploads = serialize_env
    else:
        serialize_uploads = bool(fb.get("serialize_uploads", True))

    config = Config(
        api_url=api_url,
        api_token=api_token.strip(),
        insecure=_resolve_bool(
            insecure, "INSPECTION_INSECURE", fb.get("insecure", False)
        ),
        debug=_resolve_bool(debug, "INSPECTION_DEBUG", fb.get("debug", False)),
        timeout=final_timeout,
        sample_data=_resolve_bool(
            sample_data,
            "INSPECTION_SAMPLE_DATA",
            fb.get("sample_data", False),
        ),
        analytics=analytics,
        serialize_uploads=serialize_uploads,
    )

    validate_config(config)

    return config
