"""Client settings for the SCSS language server."""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

logger = logging.getLogger("feuille")

DEFAULT_SCANNER_EXCLUDE = [
    "**/.git",
    "**/node_modules",
    "**/bower_components",
]


def _to_snake_case(key: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in key)


@dataclass
class Settings:
    """
    Settings forwarded by the client.

    Attributes:
        scanner_depth: Maximum directory depth explored by the workspace scan.
        scanner_exclude: Glob patterns of directories skipped by the scan.
        scanner_limit: Maximum number of stylesheets indexed by the scan.
        scan_imported_files: Follow `@import`/`@use` targets while indexing.
        show_errors: Surface unreadable files to the client as warnings.
        log_level: Level of the `feuille` logger.
    """

    scanner_depth: int = 30
    scanner_exclude: List[str] = field(
        default_factory=lambda: list(DEFAULT_SCANNER_EXCLUDE)
    )
    scanner_limit: int = 1000
    scan_imported_files: bool = True
    show_errors: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> "Settings":
        """
        Build settings from a client payload.

        Accepts both camelCase and snake_case keys, either at the top level
        or under an `scss` section. Unknown keys are ignored; values that
        cannot be converted to the setting's type keep the default.
        """
        if not isinstance(options, dict):
            return cls()
        section = options.get("scss", options)
        if not isinstance(section, dict):
            return cls()

        kinds = {f.name: f.type for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in section.items():
            name = _to_snake_case(key)
            if name not in kinds:
                logger.debug("Ignoring unknown setting: %s", key)
                continue
            try:
                values[name] = _coerce(value, kinds[name])
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid value for %s: %r", key, value)
        return cls(**values)


def _coerce(value: Any, kind: Any) -> Any:
    """Convert a raw client value to the type of a settings field."""
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        raise TypeError(f"expected a boolean, got {value!r}")
    if kind is int:
        if isinstance(value, bool) or value is None:
            raise TypeError(f"expected an integer, got {value!r}")
        return int(value)
    if kind is str:
        if value is None:
            raise TypeError("expected a string, got None")
        return str(value)
    # List[str]
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    raise TypeError(f"expected a list of strings, got {value!r}")
