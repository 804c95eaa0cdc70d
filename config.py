"""
Control Mirror - Configuration
All tunable parameters in one place.
"""

import os
from dataclasses import dataclass, field
from typing import Dict
from binding.binding_table import MAX_SLOTS
from binding.models import DebugLevel

SLOT_ENV_PREFIX = "MIRROR_SLOT_"


@dataclass
class EngineConfig:
    count: int = 8                      # Monitored slots, 1-100
    trigger_feedback_seconds: float = 1.0   # Trigger on-period, 0-300
    debug_level: DebugLevel = DebugLevel.NONE
    separator: str = "."                # component<sep>control
    identifiers: Dict[int, str] = field(default_factory=dict)  # slot -> "component.control"


@dataclass
class HostConfig:
    ws_url: str = ""                    # Empty: no remote feed
    objects_file: str = ""              # Optional JSON seed for the object space
    reconnect_seconds: int = 3
    ping_interval: int = 20             # Seconds


@dataclass
class DashboardConfig:
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class MirrorConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    host: HostConfig = field(default_factory=HostConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    log_level: str = "INFO"
    log_path: str = "data/mirror.log"

    @classmethod
    def from_env(cls) -> "MirrorConfig":
        """Load config with environment variable overrides."""
        config = cls()
        config.engine.count = int(os.getenv("MIRROR_COUNT", str(config.engine.count)))
        config.engine.trigger_feedback_seconds = float(
            os.getenv("MIRROR_TRIGGER_FEEDBACK", str(config.engine.trigger_feedback_seconds))
        )
        config.engine.debug_level = DebugLevel.parse(os.getenv("MIRROR_DEBUG_LEVEL", "None"))
        config.engine.separator = os.getenv("MIRROR_SEPARATOR", config.engine.separator) or "."
        config.engine.identifiers = identifiers_from_env(os.environ)
        config.host.ws_url = os.getenv("HOST_WS_URL", "")
        config.host.objects_file = os.getenv("HOST_OBJECTS_FILE", "")
        config.dashboard.enabled = os.getenv("DASHBOARD_ENABLED", "true").lower() == "true"
        config.dashboard.port = int(os.getenv("DASHBOARD_PORT", str(config.dashboard.port)))
        config.log_level = os.getenv("LOG_LEVEL", "INFO")
        config.log_path = os.getenv("LOG_PATH", config.log_path)
        return config


def identifiers_from_env(environ) -> Dict[int, str]:
    """Collect MIRROR_SLOT_<n>=component.control entries."""
    identifiers = {}
    for key, value in environ.items():
        if not key.startswith(SLOT_ENV_PREFIX):
            continue
        suffix = key[len(SLOT_ENV_PREFIX):]
        if suffix.isdigit() and 1 <= int(suffix) <= MAX_SLOTS:
            identifiers[int(suffix)] = value
    return identifiers
