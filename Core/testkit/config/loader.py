from __future__ import annotations

import json
import logging
from pathlib import Path

from testkit.config.schema import SuiteConfig


class ConfigLoader:
    """Loads and validates the JSON suite configuration."""

    @staticmethod
    def load(path: str | Path) -> SuiteConfig:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return SuiteConfig.model_validate(payload)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("testkit").setLevel(level.upper())
