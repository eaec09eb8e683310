"""Identity of the registered shell extension."""

from __future__ import annotations

from pathlib import Path
from typing import Final
from uuid import UUID

from dropsymlink.domain.registration import ShellExtension

from .env import optional_env_var

EXTENSION_CLASS_ID: Final[UUID] = UUID("96D16936-E510-4EA4-8EE8-BC9C0BD7057B")
EXTENSION_NAME: Final[str] = "Drop for Symlink"
DEFAULT_SERVER_PATH: Final[Path] = Path(__file__).resolve().parents[1] / "host.py"


def get_extension_config() -> ShellExtension:
    override = optional_env_var("DROPSYMLINK_SERVER_PATH")
    server_path = Path(override).expanduser().resolve() if override else DEFAULT_SERVER_PATH
    return ShellExtension(
        class_id=EXTENSION_CLASS_ID,
        name=EXTENSION_NAME,
        server_path=server_path,
    )
