"""Settings for kvlifecycle built on Pydantic Settings.

Configuration Sources (precedence order):
    1. Environment variables (highest priority)
    2. ``.env`` file in the working directory
    3. Default values in code (lowest priority)

Environment Variable Naming:
    - AZURE_*: Service principal credentials (AzureCredentials)
    - AZURE_CLOUD_*: Authority and management endpoints (CloudSettings)
    - KVLIFECYCLE_*: Run configuration (LifecycleSettings)

Quick Start:
    >>> from kvlifecycle.settings import get_settings
    >>> settings = get_settings()
    >>> settings.group_name
    'kvlifecycle-sample-group'
"""

from .base import KVBaseSettings
from .cloud import CloudSettings
from .credentials import AzureCredentials
from .lifecycle import LifecycleSettings
from .main import get_settings, reload_settings

__all__ = [
    "KVBaseSettings",
    "AzureCredentials",
    "CloudSettings",
    "LifecycleSettings",
    "get_settings",
    "reload_settings",
]
