"""Invalidation service: decides when a linked JAR must be rebuilt."""

from .service import InvalidationEngine

__all__ = ["InvalidationEngine"]
