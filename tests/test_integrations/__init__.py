"""
Integration tests for Sentinel contrib modules.

Tests cover:
- Starlette class-based endpoints
"""

from __future__ import annotations
