from __future__ import annotations

from . import product_converter

__all__ = ["product_converter"]
