# src/gcl_request_log/application/services/call_site.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Best-effort call-site resolution via frame inspection."""

from __future__ import annotations

import os
import sys

from gcl_request_log.domain.entities.log_entry import SourceLocation

__all__ = ["resolve_source_location"]

_UNKNOWN = SourceLocation()


def resolve_source_location(skip: int) -> SourceLocation:
    """Return the location ``skip`` frames above the immediate caller.

    ``skip=0`` names the function that called this helper; each increment
    walks one frame further out. A stack that is too shallow, or an
    interpreter without frame support, yields an empty location.

    Args:
        skip: Number of frames to skip above the caller.

    Returns:
        SourceLocation: Short file name, line number as text and
        ``module.qualname`` of the function.
    """
    try:
        frame = sys._getframe(skip + 1)
    except (ValueError, AttributeError):
        return _UNKNOWN

    code = frame.f_code
    module = frame.f_globals.get("__name__", "")
    qualname = getattr(code, "co_qualname", code.co_name)
    return SourceLocation(
        file=os.path.basename(code.co_filename),
        line=str(frame.f_lineno),
        function=f"{module}.{qualname}" if module else qualname,
    )
