from __future__ import annotations

import copy
import inspect
from pathlib import Path
from typing import Any, Mapping

from testkit.config.schema import AppConfigEntry
from testkit.core.events import BeforeClass
from testkit.core.exceptions import ConfigurationError
from testkit.core.observer import FixtureObserver


class DirectoryConfigProvider(FixtureObserver):
    """Builds application settings from the directory holding the running case.

    Each configured directory applies to the cases stored in it or below it.
    When several directories match, the shallower ones are applied first and
    deeper ones override them:

        provider = DirectoryConfigProvider({
            "/srv/app/tests": {"app": {"SECRET_KEY": "test"}},
            "/srv/app/tests/admin": {"server_vars": {"SERVER_NAME": "admin.local"}},
        })

    Register it before the application manager so the case directory is known
    when the application is built.
    """

    def __init__(self, entries: Mapping[str, AppConfigEntry | Mapping[str, Any]]) -> None:
        if not entries:
            raise ConfigurationError("Application config cannot be empty")
        self.entries: dict[Path, AppConfigEntry] = {}
        for raw_directory, raw_entry in entries.items():
            directory = Path(raw_directory).resolve()
            if not directory.is_dir():
                raise ConfigurationError(f"Config key must be an existing tests directory: {raw_directory}")
            entry = raw_entry if isinstance(raw_entry, AppConfigEntry) else AppConfigEntry.model_validate(raw_entry)
            for bootstrap_file in entry.bootstrap_files:
                if not Path(bootstrap_file).is_file():
                    raise ConfigurationError(f"Invalid bootstrap file: {bootstrap_file}")
            self.entries[directory] = entry
        self.case_directory: Path | None = None
        self._resolved: AppConfigEntry | None = None

    def on_before_class(self, event: BeforeClass) -> None:
        self.set_case_directory(Path(inspect.getfile(event.case_type)).parent)

    def set_case_directory(self, directory: str | Path) -> None:
        self.case_directory = Path(directory).resolve()
        self._resolved = None

    def get_bootstrap_files(self) -> list[str]:
        return list(self._config().bootstrap_files)

    def get_server_vars(self) -> dict[str, str]:
        return dict(self._config().server_vars)

    def get_app_config(self) -> dict[str, Any]:
        app_config = self._config().app
        if not app_config:
            raise ConfigurationError(f"Application config is empty for {self.case_directory}")
        return copy.deepcopy(app_config)

    def matching_directories(self) -> list[Path]:
        if self.case_directory is None:
            raise ConfigurationError("No test case directory known; was before_class dispatched?")
        matches = [
            directory
            for directory in self.entries
            if directory == self.case_directory or directory in self.case_directory.parents
        ]
        return sorted(matches, key=lambda item: len(item.parts))

    def _config(self) -> AppConfigEntry:
        if self._resolved is None:
            bootstrap_files: list[str] = []
            server_vars: dict[str, str] = {}
            app: dict[str, Any] = {}
            for directory in self.matching_directories():
                entry = self.entries[directory]
                bootstrap_files.extend(item for item in entry.bootstrap_files if item not in bootstrap_files)
                server_vars.update(entry.server_vars)
                app = deep_merge(app, entry.app)
            self._resolved = AppConfigEntry(bootstrap_files=bootstrap_files, server_vars=server_vars, app=app)
        return self._resolved


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged
