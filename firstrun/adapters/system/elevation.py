"""Elevation and platform checks."""

from __future__ import annotations

import ctypes
import sys


def is_windows() -> bool:
    return sys.platform == "win32"


def is_admin() -> bool:
    """Whether the current process runs with administrator rights."""
    if not is_windows():
        return False
    try:
        return ctypes.windll.shell32.IsUserAnAdmin() != 0
    except (AttributeError, OSError):
        return False
