from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

# Settings map the YAML config file to typed structures.


class LoggingSettings(BaseModel):
    # Structured log sink selection and level threshold.
    model_config = ConfigDict(extra="forbid", frozen=True)
    sink: Literal["none", "stdout", "jsonl"] = "none"
    level: Literal["debug", "info", "warning", "error"] = "info"
    path: str | None = None

    @model_validator(mode="after")
    def _jsonl_requires_path(self) -> "LoggingSettings":
        if self.sink == "jsonl" and not self.path:
            raise ValueError("logging.path is required when logging.sink is jsonl")
        return self


class FactorySettings(BaseModel):
    # Policies applied by the factory when resolving and synthesizing contracts.
    model_config = ConfigDict(extra="forbid", frozen=True)
    unsupported_members: Literal["reject", "skip"] = "reject"
    text_default: Literal["empty", "none"] = "empty"
    check_arity: bool = True
    logging: LoggingSettings = LoggingSettings()
