from enum import Enum
from typing import Any, Callable

MAX_DETECTION_DEPTH = 10


class TokenFormat(Enum):
    """Known design-tool token export shapes."""
    DTCG_VARIABLES = "dtcg-variables"      # {"Color": {"Primary": {"$type": ..., "$value": ...}}}
    STYLE_DICTIONARY = "style-dictionary"  # {"collections": [{"modes": [{"variables": [...]}]}]}
    FLAT = "flat"                          # {"color": {"primary": {"value": ...}}}
    UNKNOWN = "unknown"


def _is_style_dictionary(document: dict) -> bool:
    collections = document.get("collections")
    if not isinstance(collections, list) or not collections:
        return False
    first = collections[0]
    if not isinstance(first, dict) or not isinstance(first.get("modes"), list):
        return False
    return any(isinstance(mode, dict) and isinstance(mode.get("variables"), list)
               for mode in first["modes"])


def _contains_dtcg_leaf(node: Any, typed: bool = False, depth: int = 0) -> bool:
    """A ``$value`` leaf whose ``$type`` is set on it or on an enclosing group."""
    if depth > MAX_DETECTION_DEPTH or not isinstance(node, dict):
        return False
    typed = typed or "$type" in node
    if "$value" in node:
        return typed
    return any(_contains_dtcg_leaf(child, typed, depth + 1)
               for key, child in node.items()
               if isinstance(child, dict) and not str(key).startswith("$"))


def _is_flat_leaf(node: dict) -> bool:
    return "value" in node and "$value" not in node


def _contains_leaf(node: Any, is_leaf: Callable[[dict], bool], depth: int = 0) -> bool:
    if depth > MAX_DETECTION_DEPTH or not isinstance(node, dict):
        return False
    if is_leaf(node):
        return True
    return any(_contains_leaf(child, is_leaf, depth + 1)
               for key, child in node.items()
               if isinstance(child, dict) and not str(key).startswith("$"))


def detect_format(document: Any) -> TokenFormat:
    """
    Classify a parsed JSON document by structural fingerprint.

    Order is fixed: Style-Dictionary collections, then DTCG ``$type``/``$value`` leaves,
    then flat ``value`` leaves. Anything else, including non-object input, is
    UNKNOWN. Never raises.
    """
    if not isinstance(document, dict):
        return TokenFormat.UNKNOWN
    if _is_style_dictionary(document):
        return TokenFormat.STYLE_DICTIONARY
    if _contains_dtcg_leaf(document):
        return TokenFormat.DTCG_VARIABLES
    if _contains_leaf(document, _is_flat_leaf):
        return TokenFormat.FLAT
    return TokenFormat.UNKNOWN
