"""Load optional board configuration from a YAML file."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    DEFAULT_ACTIVITY_CAPACITY,
    DEFAULT_AVATAR_REF,
    DEFAULT_PEER_ACTIVITY_PROBABILITY,
    RESERVED_TITLES,
    SYSTEM_ACTOR_NAME,
)


@dataclass
class BoardConfig:
    """Tunables for one board instance."""

    activity_log_capacity: int = DEFAULT_ACTIVITY_CAPACITY
    reserved_titles: tuple[str, ...] = field(default_factory=lambda: RESERVED_TITLES)
    default_avatar_ref: str = DEFAULT_AVATAR_REF
    system_actor_name: str = SYSTEM_ACTOR_NAME
    peer_activity_probability: float = DEFAULT_PEER_ACTIVITY_PROBABILITY

    def is_reserved_title(self, title: str) -> bool:
        folded = title.strip().casefold()
        return any(folded == r.casefold() for r in self.reserved_titles)


def _validate(raw: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    cap = raw.get("activity_log_capacity")
    if cap is not None and (not isinstance(cap, int) or isinstance(cap, bool) or cap < 1):
        errors.append("'activity_log_capacity' must be a positive integer")
    prob = raw.get("peer_activity_probability")
    if prob is not None and (not isinstance(prob, (int, float)) or not 0.0 <= float(prob) <= 1.0):
        errors.append("'peer_activity_probability' must be a number between 0 and 1")
    titles = raw.get("reserved_titles")
    if titles is not None and (not isinstance(titles, list) or not all(isinstance(t, str) for t in titles)):
        errors.append("'reserved_titles' must be a list of strings")
    for key in ("default_avatar_ref", "system_actor_name"):
        val = raw.get(key)
        if val is not None and not isinstance(val, str):
            errors.append(f"'{key}' must be a string")
    return errors


def config_from_dict(raw: dict[str, Any]) -> BoardConfig:
    """Build a config from a mapping, ignoring unknown keys."""
    known = {f.name for f in fields(BoardConfig)}
    values = {k: v for k, v in raw.items() if k in known and v is not None}
    if "reserved_titles" in values:
        values["reserved_titles"] = tuple(values["reserved_titles"])
    if "peer_activity_probability" in values:
        values["peer_activity_probability"] = float(values["peer_activity_probability"])
    return BoardConfig(**values)


def load_board_config(path: Path) -> tuple[BoardConfig, str | None]:
    """Load the optional board config file.

    Args:
        path: Location of the YAML file.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns
        the defaults and `None`. On any error the defaults are returned with
        the message.
    """
    if not path.exists():
        return BoardConfig(), None
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        return BoardConfig(), f"{path.name}: {exc.__class__.__name__}: {exc}"
    except yaml.YAMLError as exc:
        return BoardConfig(), f"{path.name}: YAMLError: {exc}"
    if data is None:
        return BoardConfig(), None
    if not isinstance(data, dict):
        return BoardConfig(), f"{path.name}: expected object, got {type(data).__name__}"
    errors = _validate(data)
    if errors:
        return BoardConfig(), f"{path.name}: " + "; ".join(errors)
    return config_from_dict(data), None
