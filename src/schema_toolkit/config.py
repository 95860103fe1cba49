"""Loading of toolkit settings from TOML files."""

from pathlib import Path
from tomllib import load
from typing import Any, NotRequired, TypedDict

SECTION = "schema-toolkit"


class Settings(TypedDict):
    """Settings read from the ``[schema-toolkit]`` table of a config file."""

    schema: NotRequired[str]
    include: NotRequired[list[str]]
    exclude: NotRequired[list[str]]
    base_class: NotRequired[str]


STRING_KEYS = frozenset(("schema", "base_class"))
LIST_KEYS = frozenset(("include", "exclude"))


def _validate(section: dict[str, Any]) -> Settings:
    """Check keys and value types of a settings table."""
    if unknown := set(section) - STRING_KEYS - LIST_KEYS:
        msg = f"Unknown settings: {', '.join(sorted(unknown))}"
        raise ValueError(msg)

    for key in STRING_KEYS & section.keys():
        if not isinstance(section[key], str):
            msg = f"Setting {key} must be a string"
            raise ValueError(msg)

    for key in LIST_KEYS & section.keys():
        value = section[key]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            msg = f"Setting {key} must be a list of table names"
            raise ValueError(msg)

    settings: Settings = section  # pyright: ignore[reportAssignmentType]
    return settings


def load_settings(config_location: Path | None) -> Settings:
    """Load settings from a config file; no file means default settings."""
    if config_location is None:
        return {}
    with config_location.open("rb") as f:
        return _validate(load(f).get(SECTION, {}))
