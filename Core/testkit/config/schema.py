from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class RemoteEndpoint(BaseModel):
    url: str = "http://localhost:4444/wd/hub"
    capabilities: dict[str, Any] = Field(default_factory=lambda: {"browserName": "firefox"})
    connection_timeout: float | None = None
    request_timeout: float | None = None
    headless: bool = False

    @field_validator("capabilities")
    @classmethod
    def validate_browser_name(cls, value: dict[str, Any]) -> dict[str, Any]:
        browser_name = str(value.get("browserName", "")).lower()
        if browser_name not in {"chrome", "firefox"}:
            raise ValueError(f"Unsupported browserName: {value.get('browserName')!r}")
        return {**value, "browserName": browser_name}

    @field_validator("connection_timeout", "request_timeout")
    @classmethod
    def validate_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("timeouts must be positive")
        return value

    @property
    def browser_name(self) -> str:
        return self.capabilities["browserName"]


class AppConfigEntry(BaseModel):
    bootstrap_files: list[str] = Field(default_factory=list)
    server_vars: dict[str, str] = Field(default_factory=dict)
    app: dict[str, Any] = Field(default_factory=dict)


class SuiteConfig(BaseModel):
    browser: RemoteEndpoint = Field(default_factory=RemoteEndpoint)
    app_config: dict[str, AppConfigEntry] = Field(default_factory=dict)
    database_url: str | None = None
    log_level: str = "INFO"
    audit_root: str | None = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return normalized
