"""Client for pushing compiled scripts to the script service."""

from __future__ import annotations

__version__ = "0.1.0"
