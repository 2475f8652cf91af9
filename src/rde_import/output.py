"""
Output Formatting

Formats import results for CLI display.
"""

import json
import sys
from dataclasses import fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any


def serialize(obj: Any) -> Any:
    """
    Convert models to JSON-compatible values.

    Enums become their values, bytes become hex, sets become sorted lists.
    Fields declared with repr=False are left out.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: serialize(getattr(obj, f.name)) for f in fields(obj) if f.repr}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, bytes):
        return obj.hex().upper()
    if isinstance(obj, (set, frozenset)):
        return sorted((serialize(item) for item in obj), key=lambda v: json.dumps(v, sort_keys=True))
    if isinstance(obj, (list, tuple)):
        return [serialize(item) for item in obj]
    if isinstance(obj, dict):
        return {k: serialize(v) for k, v in obj.items()}
    return obj


def format_json(data: Any) -> str:
    """Format data as indented JSON."""
    return json.dumps(serialize(data), indent=2, default=str)


def print_success(message: str) -> None:
    """Print success message."""
    print(f"SUCCESS: {message}")


def print_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"ERROR: {message}", file=sys.stderr)


def print_info(message: str) -> None:
    """Print info message."""
    print(f"INFO: {message}")
