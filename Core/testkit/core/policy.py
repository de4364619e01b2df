from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class SharingPolicy:
    """Fixture reuse rules declared by one test case type."""

    share_app: bool = False
    share_db_fixture: bool = False
    share_browser_session: bool = False
    share_cookies: bool = False
    requires_browser: bool = False
    db_tables: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_case(cls, case_type: type) -> SharingPolicy:
        tables_to_load = getattr(case_type, "db_tables_to_load", None)
        tables = tables_to_load() if callable(tables_to_load) else {}
        return cls(
            share_app=bool(getattr(case_type, "share_app", False)),
            share_db_fixture=bool(getattr(case_type, "share_db_fixture", False)),
            share_browser_session=bool(getattr(case_type, "share_browser_session", False)),
            share_cookies=bool(getattr(case_type, "share_cookies", False)),
            requires_browser=bool(getattr(case_type, "requires_browser", False)),
            db_tables=MappingProxyType(_tables_by_alias(tables or {})),
        )


def _tables_by_alias(tables) -> dict[str, Any]:
    if isinstance(tables, Mapping):
        return dict(tables)
    by_alias: dict[str, Any] = {}
    for spec in tables:
        by_alias[getattr(spec, "name", None) or str(spec)] = spec
    return by_alias
