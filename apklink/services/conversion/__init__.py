"""Conversion service wrapping dex2jar."""

from .service import Converter

__all__ = ["Converter"]
