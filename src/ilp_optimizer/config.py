from __future__ import annotations

import logging
import sys
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pythonjsonlogger.json import JsonFormatter

LOGGER_NAME = "ilp_optimizer"


class Settings(BaseSettings):
    """Process configuration, read once from the environment (and .env when present)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    solver: str = "glpk"
    use_presolve: bool = False
    time_limit: Optional[float] = Field(default=None, alias="SOLVER_TIME_LIMIT", gt=0)

    host: str = "0.0.0.0"
    port: int = 9000
    mcp_transport: Literal["stdio", "streamable-http"] = "streamable-http"

    protect: bool = False
    api_key: Optional[str] = None
    json_limit: int = 4 * 1024 * 1024

    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()


class CompactJsonFormatter(JsonFormatter):
    """JSON formatter that leaves out fields whose value is None."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        for key in [k for k, v in log_record.items() if v is None]:
            del log_record[key]


def setup_logging(level: str = "INFO", json_output: bool = True) -> None:
    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(
            CompactJsonFormatter(
                "%(asctime)s %(levelname)s %(name)s %(message)s %(count)s %(total)s %(row_count)s %(reason)s"
            )
        )
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False
