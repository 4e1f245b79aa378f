from functools import lru_cache
from typing import Dict, Any

from .config import Settings
from .core.events.event_bus import ProcessEventBus
from .services.mount_process_manager import MountProcessManager

# Global singleton instances
_singletons: Dict[str, Any] = {}


@lru_cache
def get_settings() -> Settings:
    """Hent Settings singleton instance."""
    return Settings()


def get_event_bus() -> ProcessEventBus:
    if "event_bus" not in _singletons:
        _singletons["event_bus"] = ProcessEventBus()
    return _singletons["event_bus"]


def get_mount_process_manager() -> MountProcessManager:
    if "mount_process_manager" not in _singletons:
        _singletons["mount_process_manager"] = MountProcessManager(
            settings=get_settings(),
            event_bus=get_event_bus(),
        )
    return _singletons["mount_process_manager"]


def reset_singletons() -> None:
    """Reset all singletons (useful for testing)."""
    _singletons.clear()
    get_settings.cache_clear()
