
import math
import re
from typing import Any, Dict, Iterable, List

MAX_FEATURE_KEYS = 30

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_LEADING_FLOAT_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def collect_feature_keys(
    feature_maps: Iterable[Dict[str, Any]],
    max_keys: int = MAX_FEATURE_KEYS,
) -> List[str]:
    """
    Build the ordered feature vocabulary.

    Keys holding a number or a string are collected in first-seen order and
    truncated to max_keys. The resulting order is part of the artifact
    contract: weight i+1 always belongs to keys[i].
    """
    keys: Dict[str, None] = {}
    for features in feature_maps:
        if not isinstance(features, dict):
            continue
        for key, value in features.items():
            if _is_number(value) or isinstance(value, str):
                keys.setdefault(key, None)
    return list(keys)[:max_keys]


def parse_feature_value(value: Any) -> float:
    """
    Numeric value of a raw feature.

    Finite numbers pass through. Strings keep only digits, '.' and '-' and
    the longest leading float is parsed ("85 mp" -> 85.0, "-3 etaj" -> -3.0,
    "1.200.000" -> 1.2). Anything else is 0.
    """
    if _is_number(value):
        number = float(value)
        return number if math.isfinite(number) else 0.0
    if isinstance(value, str):
        match = _LEADING_FLOAT_RE.match(_NON_NUMERIC_RE.sub("", value))
        if match:
            return float(match.group(0))
    return 0.0


def build_feature_vector(features: Dict[str, Any], keys: List[str]) -> List[float]:
    """Intercept-prefixed vector [1, f(keys[0]), f(keys[1]), ...]."""
    features = features if isinstance(features, dict) else {}
    return [1.0] + [parse_feature_value(features.get(k)) for k in keys]
