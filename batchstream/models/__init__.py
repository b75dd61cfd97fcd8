"""
Data Models Layer.

This package contains the Pydantic models that define validated settings.
"""

from .config import TransportConfig

__all__ = ["TransportConfig"]
