"""
JSON serialization utilities for TokenWeaver.
Handles enums, dataclasses, token values and Path objects so generators can
dump records without hand-converting them first.
"""

import datetime
import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class TokenWeaverJSONEncoder(json.JSONEncoder):
    """JSON encoder aware of TokenWeaver model types."""

    def default(self, obj: Any) -> Any:
        # Token values and records that know their own JSON shape
        if hasattr(obj, 'to_json'):
            return obj.to_json()
        if hasattr(obj, 'to_dict'):
            return obj.to_dict()

        if isinstance(obj, Enum):
            return obj.value

        if isinstance(obj, Path):
            return obj.as_posix()

        if isinstance(obj, (datetime.datetime, datetime.date)):
            return obj.isoformat()

        if is_dataclass(obj):
            return asdict(obj)

        if isinstance(obj, (set, tuple)):
            return list(obj)

        return super().default(obj)


def safe_json_dumps(obj: Any, **kwargs) -> str:
    """
    Serialize an object to a JSON string with the TokenWeaver encoder.
    Output is deterministic for identical input.
    """
    kwargs.setdefault('ensure_ascii', False)
    return json.dumps(obj, cls=TokenWeaverJSONEncoder, **kwargs)


def pretty_json(obj: Any) -> str:
    """Two-space indented JSON with a trailing newline, as written into packages."""
    return safe_json_dumps(convert_for_json(obj), indent=2) + "\n"


def convert_for_json(obj: Any) -> Any:
    """
    Recursively convert an object to be JSON-serializable.
    Useful when data must be inspected or reshaped before json.dumps().
    """
    if hasattr(obj, 'to_json'):
        return convert_for_json(obj.to_json())
    if hasattr(obj, 'to_dict') and not isinstance(obj, dict):
        return convert_for_json(obj.to_dict())

    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, Path):
        return obj.as_posix()

    if isinstance(obj, (datetime.datetime, datetime.date)):
        return obj.isoformat()

    if isinstance(obj, dict):
        return {str(key): convert_for_json(value) for key, value in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [convert_for_json(item) for item in obj]

    if isinstance(obj, set):
        return sorted(convert_for_json(item) for item in obj)

    if is_dataclass(obj):
        return convert_for_json(asdict(obj))

    return obj
