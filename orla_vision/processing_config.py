"""
Global processing configuration for the vision pipeline.

This module exposes a simple dict and helper functions so the control
routes can toggle pipeline stages and tune constants at runtime via an HTTP
call. Values take effect the next time a session is enabled.

Every value is coerced to the type of its default and range-checked before it
is stored; a bad update raises ConfigError and leaves the config unchanged.
"""
from typing import Any, Dict

_DEFAULTS: Dict[str, Any] = {
    "enable_smoothing": True,
    "enable_emotion": True,
    "enable_presence": True,
    "enable_gestures": True,
    "smoothing_factor": 0.3,
    "emotion_history_size": 30,
    "gesture_history_size": 10,
    "blink_min_interval_ms": 100.0,
    "camera_src": 0,
    "camera_width": 640,
    "camera_height": 480,
    "log_events": False,
}

# key -> (predicate, description of the allowed range)
_LIMITS = {
    "smoothing_factor": (lambda v: 0.0 < v <= 1.0, "in (0, 1]"),
    "emotion_history_size": (lambda v: v >= 1, ">= 1"),
    "gesture_history_size": (lambda v: v >= 1, ">= 1"),
    "blink_min_interval_ms": (lambda v: v >= 0.0, ">= 0"),
    "camera_src": (lambda v: v >= 0, ">= 0"),
    "camera_width": (lambda v: v >= 1, ">= 1"),
    "camera_height": (lambda v: v >= 1, ">= 1"),
}

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}

_config: Dict[str, Any] = dict(_DEFAULTS)


class ConfigError(ValueError):
    """A configuration value has the wrong type or is out of range."""


def _to_bool(key, value):
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
        return value.strip().lower() in _TRUE
    raise ConfigError(f"{key}: expected a boolean, got {value!r}")


def coerce_value(key: str, value: Any) -> Any:
    """Convert `value` to the type of the default for `key` and check its range."""
    default = _DEFAULTS[key]
    if isinstance(default, bool):
        return _to_bool(key, value)
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected a number, got {value!r}")
    try:
        out = type(default)(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key}: expected {type(default).__name__}, got {value!r}") from exc
    limit = _LIMITS.get(key)
    if limit is not None and not limit[0](out):
        raise ConfigError(f"{key}: {out!r} is out of range, expected {limit[1]}")
    return out


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return a checked copy of a full config dict; missing keys take their default."""
    return {k: coerce_value(k, cfg.get(k, default)) for k, default in _DEFAULTS.items()}


def get_config() -> Dict[str, Any]:
    return dict(_config)


def update_config(updates: Dict[str, Any]) -> Dict[str, Any]:
    """Apply known keys, all or nothing. Unknown keys are ignored."""
    checked = {k: coerce_value(k, v) for k, v in updates.items() if k in _DEFAULTS}
    _config.update(checked)
    return get_config()


def reset_config():
    _config.clear()
    _config.update(_DEFAULTS)
