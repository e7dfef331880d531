"""
dyngraph CLI - Command line tools for serving and checking schemas.
"""

from __future__ import annotations

from .main import main, app

__all__ = ["main", "app"]
