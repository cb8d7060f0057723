"""
Config package export.

Keeps import sites clean and stable:
    from gcl_request_log.config import RequestLogConfig, get_settings
"""

from __future__ import annotations

from .request_log import RequestLogConfig
from .settings import Settings, get_settings

__all__ = ["RequestLogConfig", "Settings", "get_settings"]
