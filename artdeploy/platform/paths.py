"""Platform-aware default locations."""

from __future__ import annotations

import os
from pathlib import Path

from .detection import Platform

__all__ = [
    "home",
    "user_cache_dir",
]

# Application name used for directory naming
APP_NAME = "artdeploy"


def home(platform: Platform) -> Path:
    """User's home directory, honouring USERPROFILE/HOME for containers and CI."""
    if platform.is_windows:
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile)
    else:
        home_env = os.environ.get("HOME")
        if home_env:
            return Path(home_env)
    return Path.home()


def user_cache_dir(platform: Platform) -> Path:
    """Default artifact cache root.

    Location: $XDG_CACHE_HOME/artdeploy or ~/.cache/artdeploy (Linux/macOS),
    %LOCALAPPDATA%/artdeploy/cache (Windows).
    """
    if platform.is_windows:
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            return Path(local_app_data) / APP_NAME / "cache"
        return home(platform) / "AppData" / "Local" / APP_NAME / "cache"

    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache) / APP_NAME
    return home(platform) / ".cache" / APP_NAME
