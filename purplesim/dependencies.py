"""FastAPI dependency injection providers."""

from .config import PurpleSimConfig, get_config
from .utils.logging import get_logger

_dep_logger = get_logger("dependencies")

_config_instance: PurpleSimConfig | None = None
_event_bus = None
_simulation_engine = None


def get_app_config() -> PurpleSimConfig:
    """Get the application config singleton."""
    global _config_instance
    if _config_instance is None:
        _config_instance = get_config()
    return _config_instance


def get_event_bus():
    """Get the EventBus singleton."""
    global _event_bus
    if _event_bus is None:
        from .utils.event_bus import EventBus
        config = get_app_config()
        _event_bus = EventBus(queue_size=config.ws_queue_size * config.ws_max_connections)
    return _event_bus


def get_simulation_engine():
    """Get the SimulationEngine singleton (wall-clock timers, publishes to the event bus)."""
    global _simulation_engine
    if _simulation_engine is None:
        from .engine.simulation import SimulationEngine
        config = get_app_config()
        _simulation_engine = SimulationEngine.from_config(config, event_bus=get_event_bus())
        _dep_logger.info("simulation_engine_created", tick_interval=config.simulation_tick_interval)
    return _simulation_engine


def reset_singletons() -> None:
    """Drop every singleton. Used on shutdown and between tests."""
    global _config_instance, _event_bus, _simulation_engine
    if _simulation_engine is not None:
        _simulation_engine.dispose()
    _config_instance = None
    _event_bus = None
    _simulation_engine = None
