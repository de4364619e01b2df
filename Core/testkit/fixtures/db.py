from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from sqlalchemy import Engine, MetaData, Table as SqlTable, create_engine, delete, insert

from testkit.core.events import AfterTest, BeforeClass, BeforeTest, EndOfCase
from testkit.core.exceptions import CircularDependencyError, InvalidStateError
from testkit.core.observer import FixtureObserver
from testkit.logging.audit import LifecycleAuditLogger

log = logging.getLogger(__name__)


@dataclass(slots=True, eq=False)
class TableSpec:
    """Fixture rows for one database table, keyed by row alias."""

    name: str
    rows: dict[str, dict[str, Any]] = field(default_factory=dict)
    depends: list[TableSpec] = field(default_factory=list)


class Table:
    def __init__(self, spec: TableSpec, engine: Engine) -> None:
        self.spec = spec
        self.engine = engine
        self.is_loaded = False
        self._table_data: dict[str, dict[str, Any]] = {}
        self._sql_table: SqlTable | None = None

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def sql_table(self) -> SqlTable:
        if self._sql_table is None:
            self._sql_table = SqlTable(self.name, MetaData(), autoload_with=self.engine)
        return self._sql_table

    def load(self) -> None:
        if self.is_loaded:
            raise InvalidStateError(f"Table '{self.name}' is already loaded")
        table_data: dict[str, dict[str, Any]] = {}
        with self.engine.begin() as connection:
            for alias, row in self.spec.rows.items():
                result = connection.execute(insert(self.sql_table).values(**row))
                primary_key = dict(zip(self.sql_table.primary_key.columns.keys(), result.inserted_primary_key or ()))
                table_data[alias] = {**row, **primary_key}
        self._table_data = table_data
        self.is_loaded = True

    def unload(self) -> None:
        if not self.is_loaded:
            raise InvalidStateError(f"Table '{self.name}' is already unloaded")
        with self.engine.begin() as connection:
            connection.execute(delete(self.sql_table))
        self._table_data = {}
        self.is_loaded = False

    def row(self, alias: str) -> dict[str, Any]:
        if not self.is_loaded:
            raise InvalidStateError(f"Table '{self.name}' is not loaded")
        try:
            return self._table_data[alias]
        except KeyError as exc:
            raise KeyError(f"No row aliased '{alias}' in table '{self.name}'") from exc


class TablesCollection:
    """Tables required by a case, dependencies placed before their dependents."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._tables: dict[str, Table] = {}

    def __contains__(self, alias: str) -> bool:
        return alias in self._tables

    def __len__(self) -> int:
        return len(self._tables)

    def get(self, alias: str) -> Table:
        try:
            return self._tables[alias]
        except KeyError as exc:
            raise KeyError(f"No fixture table aliased '{alias}'") from exc

    def aliases(self) -> list[str]:
        return list(self._tables)

    def all(self) -> list[Table]:
        return list(self._tables.values())

    def clear(self) -> None:
        self._tables = {}

    def set_tables(self, specs: Mapping[str, TableSpec]) -> None:
        self.clear()
        ordered: dict[int, tuple[str, TableSpec]] = {}
        stack: list[TableSpec] = []

        def visit(alias: str, spec: TableSpec, explicit: bool) -> None:
            key = id(spec)
            if key in ordered:
                if explicit:
                    ordered[key] = (alias, spec)
                return
            if any(item is spec for item in stack):
                chain = [item.name for item in stack[[id(item) for item in stack].index(key):]]
                raise CircularDependencyError(chain)
            stack.append(spec)
            for dependency in spec.depends:
                visit(dependency.name, dependency, False)
            stack.pop()
            ordered[key] = (alias, spec)

        for alias, spec in specs.items():
            visit(alias, spec, True)
        for alias, spec in ordered.values():
            self._tables[alias] = Table(spec, self.engine)


class DatabaseFixtureManager(FixtureObserver):
    """Loads the tables a case declares and keeps them fresh between methods."""

    fixture_name = "db"

    def __init__(
        self,
        engine: Engine | str,
        audit_logger: LifecycleAuditLogger | None = None,
    ) -> None:
        self.engine = create_engine(engine) if isinstance(engine, str) else engine
        self.collection = TablesCollection(self.engine)
        self.audit_logger = audit_logger
        self.db_required: bool | None = None
        self.share_fixture: bool | None = None
        self._case_name = ""

    def on_before_class(self, event: BeforeClass) -> None:
        self._case_name = event.case_type.__qualname__
        self.share_fixture = event.policy.share_db_fixture
        self.db_required = bool(event.policy.db_tables)
        if self.db_required:
            self.collection.set_tables(event.policy.db_tables)

    def on_before_test(self, event: BeforeTest) -> None:
        event.case.db_fixture = self
        if self.db_required:
            self.load()

    def on_after_test(self, event: AfterTest) -> None:
        if not self.db_required:
            return
        if event.isolated:
            # the parent process still believes the tables hold fresh rows
            self.unload()
            self.load()
        elif not self.share_fixture:
            self.unload()

    def on_end_of_case(self, event: EndOfCase) -> None:
        if self.db_required:
            if self.share_fixture:
                self.unload()
            self.collection.clear()
        self.db_required = None
        self.share_fixture = None

    def get_table(self, alias: str) -> Table:
        return self.collection.get(alias)

    def row(self, table_alias: str, row_alias: str) -> dict[str, Any]:
        return self.get_table(table_alias).row(row_alias)

    def load(self, table_names: Iterable[str] | None = None) -> None:
        for table in self._select(table_names):
            if not table.is_loaded:
                table.load()
                log.info("Loaded fixture table %s", table.name)
                self._audit(f"load:{table.name}")

    def unload(self, table_names: Iterable[str] | None = None) -> None:
        for table in reversed(self._select(table_names)):
            if table.is_loaded:
                table.unload()
                log.info("Unloaded fixture table %s", table.name)
                self._audit(f"unload:{table.name}")

    def _select(self, table_names: Iterable[str] | None) -> list[Table]:
        if table_names is None:
            return self.collection.all()
        wanted = set(table_names)
        unknown = wanted.difference(self.collection.aliases())
        if unknown:
            raise KeyError(f"Unknown fixture tables: {', '.join(sorted(unknown))}")
        return [self.collection.get(alias) for alias in self.collection.aliases() if alias in wanted]

    def _audit(self, action: str) -> None:
        if self.audit_logger is not None:
            self.audit_logger.write(self.fixture_name, action, self._case_name)
