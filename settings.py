"""
Run configuration for the team / connector analysis.

Values come from the command line first and fall back to environment
variables (MAIL_WORKERS, MAIL_DRAIN_TIMEOUT, MAIL_DOMAIN), then to the
defaults below. Environment values go through the same validation as
command-line values.
"""

import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_DOMAIN        = "enron.com"
DEFAULT_DRAIN_TIMEOUT = 60.0


# Factories return the raw environment string; pydantic coerces and checks it.

def default_workers() -> Union[str, int]:
    """One worker per available CPU, overridable through MAIL_WORKERS."""
    return os.environ.get("MAIL_WORKERS") or os.cpu_count() or 1


def default_drain_timeout() -> Union[str, float]:
    return os.environ.get("MAIL_DRAIN_TIMEOUT") or DEFAULT_DRAIN_TIMEOUT


def default_domain() -> str:
    return os.environ.get("MAIL_DOMAIN") or DEFAULT_DOMAIN


class Settings(BaseModel):
    model_config = ConfigDict(validate_default=True)

    mail_dir: Path = Field(
        description="Root directory of the mail corpus. Traversed breadth-first."
    )
    connectors_file: Optional[Path] = Field(
        default=None,
        description="Optional file receiving the connector addresses, one per line.",
    )
    summary_file: Optional[Path] = Field(
        default=None,
        description="Optional CSV receiving per-address degree and team statistics.",
    )
    workers: int = Field(
        default_factory=default_workers, ge=1,
        description="Size of the thread pool that reads and parses mail files.",
    )
    drain_timeout: float = Field(
        default_factory=default_drain_timeout, gt=0,
        description="Seconds to wait for the pool to drain before abandoning work.",
    )
    domain: str = Field(
        default_factory=default_domain, min_length=1,
        description="Address domain suffix recognised by the extractor, e.g. 'enron.com'.",
    )
    show_progress: bool = Field(
        default=True,
        description="Show a tqdm progress bar while files are processed.",
    )

    @field_validator("mail_dir")
    @classmethod
    def _mail_dir_exists(cls, value: Path) -> Path:
        if not value.is_dir():
            raise ValueError(f"invalid mail directory: {value}")
        return value

    @field_validator("domain")
    @classmethod
    def _strip_domain(cls, value: str) -> str:
        value = value.strip().lstrip("@").lower()
        if not value:
            raise ValueError("domain must not be empty")
        return value
