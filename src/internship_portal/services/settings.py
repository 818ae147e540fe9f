"""Configuration loading for the portal workspace.

Settings come from a ``.portalrc`` file (TOML, JSON or ``key = value``
lines) with ``PORTAL_<KEY>`` environment variables filling the gaps. TOML
tables are flattened, so ``[api] base_url`` is read as ``API_BASE_URL``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Mapping

try:  # pragma: no cover - Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore[import]


SESSION_ENV_VAR = "PORTAL_CONFIG_SESSION"
RC_PATH_ENV_VAR = "PORTAL_RC_PATH"
ENV_PREFIX = "PORTAL_"
RC_FILENAMES = (".portalrc", "config/portalrc.toml")
DEFAULT_APP_NAME = "internship-portal"
DEFAULT_ENVIRONMENT = "local"
DEFAULT_API_BASE_URL = "http://localhost:5005/api"
DEFAULT_ASSET_ORIGIN = "http://localhost:5005"

_logger = logging.getLogger("internship-portal.config")


def config_key(value: str) -> str:
    return value.strip().upper().replace("-", "_").replace(".", "_")


def decode_value(value: str) -> Any:
    """Environment values may hold JSON (numbers, booleans, objects); anything else is a string."""

    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = config_key(f"{prefix}_{key}" if prefix else str(key))
        if isinstance(value, Mapping):
            flat.update(_flatten(value, name))
        else:
            flat[name] = value
    return flat


def _parse_toml(raw: str) -> Dict[str, Any]:
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as error:
        raise ValueError(str(error)) from error


def _parse_json(raw: str) -> Dict[str, Any]:
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError("JSON configuration must be an object")
    return parsed


def _parse_pairs(raw: str) -> Dict[str, Any]:
    pairs: Dict[str, Any] = {}
    for number, line in enumerate(raw.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith(("#", ";")):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise ValueError(f"line {number}: expected key = value")
        pairs[key.strip()] = value.strip().strip("\"'")
    return pairs


RC_PARSERS: tuple[tuple[str, Callable[[str], Dict[str, Any]]], ...] = (
    ("toml", _parse_toml),
    ("json", _parse_json),
    ("pairs", _parse_pairs),
)


def parse_rc_text(raw: str) -> Dict[str, Any]:
    """Decode rc text with the first parser that accepts it; keys come back flattened."""

    if not raw.strip():
        return {}
    errors = []
    for name, parser in RC_PARSERS:
        try:
            return _flatten(parser(raw))
        except ValueError as error:  # json.JSONDecodeError included
            errors.append(f"{name}: {error}")
    raise ValueError("Unreadable portal configuration (" + "; ".join(errors) + ")")


def rc_candidates(execution_root: Path) -> Iterator[Path]:
    override = os.getenv(RC_PATH_ENV_VAR)
    if override:
        yield Path(override).expanduser()
        return
    for relative in RC_FILENAMES:
        yield execution_root / relative


class PortalConfig:
    """Key/value configuration read from ``.portalrc`` with env overrides.

    Lookups are case-insensitive; a key missing from the file falls back to
    the ``PORTAL_<KEY>`` environment variable. The decoded instance can be
    serialized to JSON so that worker processes reuse the same session.
    """

    def __init__(self, *, environment: str, execution_root: Path | str) -> None:
        self.environment = environment or DEFAULT_ENVIRONMENT
        self.execution_root = Path(execution_root)
        self.source: Path | None = None
        self._values: Dict[str, Any] = {}

    def load(self) -> None:
        self.source = next((path for path in rc_candidates(self.execution_root) if path.is_file()), None)
        if self.source is None:
            _logger.debug("portalrc.missing root=%s", self.execution_root)
            self._values = {}
            return
        try:
            self._values = parse_rc_text(self.source.read_text(encoding="utf-8"))
        except ValueError as error:
            _logger.warning("portalrc.unreadable path=%s error=%s", self.source, error)
            self._values = {}

    # ------------------------------------------------------------------ session
    def to_serialized(self) -> str:
        return json.dumps(
            {
                "environment": self.environment,
                "execution_root": str(self.execution_root),
                "source": str(self.source) if self.source else None,
                "values": self._values,
            }
        )

    @classmethod
    def from_serialized(cls, payload: str) -> "PortalConfig":
        data = decode_value(payload)
        if not isinstance(data, Mapping):
            raise TypeError("Invalid configuration session payload")
        root = data.get("execution_root")
        instance = cls(
            environment=str(data.get("environment", DEFAULT_ENVIRONMENT)),
            execution_root=Path(root) if root else Path.cwd(),
        )
        source = data.get("source")
        instance.source = Path(source) if source else None
        values = data.get("values", {})
        if isinstance(values, Mapping):
            instance._values = _flatten(values)
        return instance

    # ------------------------------------------------------------------ resolution
    def get(self, key: str, default: Any = None) -> Any:
        name = config_key(key)
        value = self._values.get(name)
        if value is not None:
            return value
        env_value = os.environ.get(f"{ENV_PREFIX}{name}")
        if env_value is not None:
            return decode_value(env_value)
        return default


def bootstrap_config(
    *,
    environment: str | None = None,
    execution_root: Path | str | None = None,
) -> PortalConfig:
    """Load the rc file and persist the session to the environment."""

    config = PortalConfig(
        environment=environment or os.getenv("PORTAL_ENVIRONMENT", DEFAULT_ENVIRONMENT),
        execution_root=Path(execution_root or Path.cwd()),
    )
    config.load()
    os.environ[SESSION_ENV_VAR] = config.to_serialized()
    return config


def load_config_session(serialized: str | None = None) -> PortalConfig | None:
    payload = serialized or os.getenv(SESSION_ENV_VAR)
    if not payload:
        return None
    return PortalConfig.from_serialized(payload)



@dataclass(frozen=True, slots=True)
class PortalSettings:
    """Runtime settings hydrated from :class:`PortalConfig`."""

    app_name: str = DEFAULT_APP_NAME
    app_display_name: str = "Internship Portal"
    app_version: str = "dev"
    environment: str = DEFAULT_ENVIRONMENT
    api_base_url: str = DEFAULT_API_BASE_URL
    asset_origin: str = DEFAULT_ASSET_ORIGIN
    request_timeout: float = 30.0
    unread_poll_seconds: float = 30.0
    companies_page_size: int = 12
    search_debounce_seconds: float = 0.3
    auth_token: str | None = None
    user_id: str | None = None
    user_role: str = "supervisor"
    log_level: str = "info"
    chat_export: bool = True

    def asset_url(self, path: str | None) -> str:
        """Absolute URL for a static asset such as a company logo or banner."""

        if not path:
            return ""
        if path.startswith(("http://", "https://", "data:")):
            return path
        return f"{self.asset_origin.rstrip('/')}/{path.lstrip('/')}"

    def public_config(self) -> dict[str, str]:
        return {
            "app_display_name": self.app_display_name,
            "app_version": self.app_version,
            "environment": self.environment,
            "api_base_url": self.api_base_url,
        }


def load_settings(config: PortalConfig | None = None) -> PortalSettings:
    config = config or load_config_session() or bootstrap_config()
    return PortalSettings(
        app_name=str(config.get("APP_NAME", DEFAULT_APP_NAME)),
        app_display_name=str(config.get("APP_DISPLAY_NAME", "Internship Portal")),
        app_version=str(config.get("APP_VERSION", "dev")),
        environment=str(config.get("ENVIRONMENT", config.environment)).lower(),
        api_base_url=str(config.get("API_BASE_URL", DEFAULT_API_BASE_URL)).rstrip("/"),
        asset_origin=str(config.get("ASSET_ORIGIN", DEFAULT_ASSET_ORIGIN)),
        request_timeout=float(config.get("REQUEST_TIMEOUT", 30.0)),
        unread_poll_seconds=float(config.get("UNREAD_POLL_SECONDS", 30.0)),
        companies_page_size=int(config.get("COMPANIES_PAGE_SIZE", 12)),
        search_debounce_seconds=float(config.get("SEARCH_DEBOUNCE_SECONDS", 0.3)),
        auth_token=config.get("AUTH_TOKEN"),
        user_id=config.get("USER_ID"),
        user_role=str(config.get("USER_ROLE", "supervisor")).lower(),
        log_level=str(config.get("LOG_LEVEL", "info")),
        chat_export=feature_enabled(config, "CHAT_EXPORT", default=True),
    )


def feature_enabled(config: PortalConfig, name: str, default: bool = False) -> bool:
    value = config.get(name)
    if value is None:
        return default
    return _as_bool(value)
