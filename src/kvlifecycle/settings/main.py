from typing import Optional

from .lifecycle import LifecycleSettings


_settings: Optional[LifecycleSettings] = None


def get_settings(force_reload: bool = False) -> LifecycleSettings:
    """Get the cached lifecycle settings, loading them on first use.

    Only entry points call this. Components receive their settings through
    the ``LifecycleContext`` built at startup.

    Args:
        force_reload: If True, creates a new instance even if one already
            exists. Useful for tests or when the environment has changed.

    Returns:
        LifecycleSettings: The cached instance
    """
    global _settings

    if _settings is None or force_reload:
        _settings = LifecycleSettings()

    return _settings


def reload_settings() -> LifecycleSettings:
    """Drop the cached instance and load the settings again."""
    global _settings
    _settings = None
    return get_settings(force_reload=True)
