"""
Runtime Configuration for ChatDesk.

Provides a singleton ClientConfig class holding endpoint, store and
simulation settings. Values default from environment variables and can be
adjusted at runtime without rebuilding the session manager.

Usage:
    from config import runtime_config
    url = runtime_config.api_url
    runtime_config.update(request_timeout_s=10.0)
"""

import json
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional
from threading import Lock

logger = logging.getLogger(__name__)


def _env_bool(key: str, default: str) -> bool:
    return os.environ.get(key, default).strip().lower() in {"1", "true", "yes", "on"}


def _first_env(*keys: str, default: str) -> str:
    """Return the first non-empty environment value from keys, else default."""
    for key in keys:
        value = os.environ.get(key, "").strip()
        if value:
            return value
    return default


@dataclass
class ClientConfig:
    """
    Singleton configuration for the chat client core.

    All values have defaults from environment variables, but can be
    changed at runtime via the update() method.
    """

    # Backend endpoints
    api_url: str = field(
        default_factory=lambda: _first_env("CHATDESK_API_URL", default="http://localhost:3000/api").rstrip("/")
    )
    autocomplete_url: str = field(
        default_factory=lambda: _first_env(
            "CHATDESK_AUTOCOMPLETE_URL",
            default="http://localhost:4200/autocomplete",
        )
    )
    request_timeout_s: float = field(
        default_factory=lambda: float(os.environ.get("CHATDESK_REQUEST_TIMEOUT_S", "30"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("CHATDESK_USER_AGENT", "chatdesk/0.1")
    )

    # Key/value stores
    redis_url: str = field(default_factory=lambda: os.environ.get("REDIS_URL", "redis://localhost:6379/0"))
    redis_enabled: bool = field(default_factory=lambda: _env_bool("REDIS_ENABLED", "false"))
    session_ttl: int = field(
        default_factory=lambda: int(os.environ.get("CHATDESK_SESSION_TTL", "86400"))
    )  # Identity store TTL; preferences never expire
    session_key: str = "chat_session_id"
    preference_key: str = "use_mock_responses"

    # Simulated replies
    simulated_mode_default: bool = field(default_factory=lambda: _env_bool("CHATDESK_SIMULATED_MODE", "false"))
    sim_latency_min_ms: int = field(
        default_factory=lambda: int(os.environ.get("CHATDESK_SIM_LATENCY_MIN_MS", "500"))
    )
    sim_latency_max_ms: int = field(
        default_factory=lambda: int(os.environ.get("CHATDESK_SIM_LATENCY_MAX_MS", "1500"))
    )

    # Autocomplete
    completion_min_chars: int = field(
        default_factory=lambda: int(os.environ.get("CHATDESK_COMPLETION_MIN_CHARS", "3"))
    )

    # Presentation config (chatHeader / welcomeMessages)
    ui_config_path: str = field(
        default_factory=lambda: os.environ.get("CHATDESK_UI_CONFIG", "assets/config.json")
    )
    header_text: str = "Chat"
    welcome_messages: List[str] = field(default_factory=list)

    # Internal state
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    # Validation ranges for numeric config values
    _VALIDATION_RANGES: Dict[str, tuple] = field(default_factory=lambda: {
        "request_timeout_s": (0.5, 300.0),
        "session_ttl": (60, 604800),
        "sim_latency_min_ms": (0, 10000),
        "sim_latency_max_ms": (0, 10000),
        "completion_min_chars": (1, 50),
    }, repr=False)

    @property
    def sim_latency_ms(self) -> tuple:
        """Simulated reply latency range as (low, high) milliseconds."""
        lo, hi = self.sim_latency_min_ms, self.sim_latency_max_ms
        return (lo, hi) if lo <= hi else (hi, lo)

    def update(self, **kwargs) -> Dict[str, Any]:
        """
        Update configuration values at runtime.

        Args:
            **kwargs: Key-value pairs to update (e.g., request_timeout_s=10.0)

        Returns:
            Dict with 'updated' (changed keys) and 'ignored' (unknown or rejected keys)
        """
        updated = []
        ignored = []

        with self._lock:
            for key, value in kwargs.items():
                if key.startswith("_") or not hasattr(self, key):
                    ignored.append(key)
                    logger.warning(f"Config ignored unknown key: {key}")
                    continue

                if key in {"api_url", "autocomplete_url", "redis_url"} and isinstance(value, str):
                    cleaned = value.strip()
                    schemes = ("redis://", "rediss://") if key == "redis_url" else ("http://", "https://")
                    if not cleaned.startswith(schemes):
                        ignored.append(key)
                        logger.warning(f"Config rejected invalid URL: {key}={value!r}")
                        continue
                    value = cleaned.rstrip("/")

                if key in self._VALIDATION_RANGES:
                    lo, hi = self._VALIDATION_RANGES[key]
                    if isinstance(value, bool) or not isinstance(value, (int, float)) or not (lo <= value <= hi):
                        ignored.append(key)
                        logger.warning(f"Config rejected {key}={value} (must be {lo}-{hi})")
                        continue

                old_value = getattr(self, key)
                setattr(self, key, value)
                updated.append(key)
                logger.info(f"Config updated: {key} = {value} (was {old_value})")

        return {"updated": updated, "ignored": ignored}

    def load_ui_config(self, path: Optional[str] = None) -> Dict[str, Any]:
        """Load presentation settings (chatHeader, welcomeMessages) from JSON.

        Missing or invalid files leave the defaults in place.
        """
        config_path = Path(path or self.ui_config_path)
        if not config_path.exists():
            logger.debug(f"UI config not found: {config_path}")
            return {}

        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read UI config {config_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"UI config {config_path} is not a JSON object")
            return {}

        applied = {}
        with self._lock:
            header = data.get("chatHeader")
            if isinstance(header, str) and header.strip():
                self.header_text = header.strip()
                applied["header_text"] = self.header_text

            welcome = data.get("welcomeMessages")
            if isinstance(welcome, list):
                self.welcome_messages = [m for m in welcome if isinstance(m, str) and m.strip()]
                applied["welcome_messages"] = list(self.welcome_messages)

        if applied:
            logger.info(f"UI config loaded: {', '.join(applied)}")
        return applied


# Singleton instance
runtime_config = ClientConfig()


def get_config() -> ClientConfig:
    """Get the singleton config instance."""
    return runtime_config
