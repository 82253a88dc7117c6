from .countdown_clock import CountdownClock, DEFAULT_TICK_INTERVAL_MS

__all__ = ["CountdownClock", "DEFAULT_TICK_INTERVAL_MS"]
