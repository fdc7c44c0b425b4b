# -*- coding: utf-8 -*-
"""
Callback data parsing. Layout is "<prefix>:<action>:<arg>[:<arg>]" and
total length stays under Telegram's 64 byte limit (ids are uuid4 strings).
"""
from __future__ import annotations

from typing import Optional


def parse_callback(data: Optional[str], expected_parts: int = 3) -> Optional[tuple[str, ...]]:
    """Split by ':' into at most expected_parts. Returns None if fewer parts."""
    parts = (data or "").split(":", expected_parts - 1)
    return tuple(parts) if len(parts) >= expected_parts else None
