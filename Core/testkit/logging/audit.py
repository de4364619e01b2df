from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True)
class LifecycleRecord:
    fixture: str
    action: str
    case: str
    pid: int
    timestamp: str


class LifecycleAuditLogger:
    """Appends one JSON line per fixture operation."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.records_path = self.root / "fixture_lifecycle.jsonl"

    def write(self, fixture: str, action: str, case: str = "") -> LifecycleRecord:
        record = LifecycleRecord(
            fixture=fixture,
            action=action,
            case=case,
            pid=os.getpid(),
            timestamp=datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ"),
        )
        with self.records_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(record)) + "\n")
        return record

    def read_records(self) -> list[LifecycleRecord]:
        if not self.records_path.exists():
            return []
        records = []
        with self.records_path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                records.append(LifecycleRecord(**json.loads(line)))
        return records

    def count(self, fixture: str, action: str) -> int:
        return sum(1 for item in self.read_records() if item.fixture == fixture and item.action == action)

    def reset(self) -> None:
        if self.records_path.exists():
            self.records_path.unlink()
