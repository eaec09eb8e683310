from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from dropsymlink.adapters.batch_file import (
    BatchDescription,
    BatchFileError,
    load_batch_description,
    to_operations,
)
from dropsymlink.domain.batch import create, default, open_existing, value
from dropsymlink.domain.ports import RootKey

if TYPE_CHECKING:
    from pathlib import Path


def _write(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "batch.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_batch_description_translates_nested_operations(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "root": "HKEY_CURRENT_USER",
            "operations": [
                {
                    "type": "node",
                    "name": "Software\\Example",
                    "operations": [
                        {"type": "value", "name": "", "data": "x"},
                        {"type": "value", "name": "Mode", "data": "on"},
                        {"type": "node", "mode": "open", "name": "Child"},
                    ],
                }
            ],
        },
    )

    description = load_batch_description(path)

    assert description.root is RootKey.CURRENT_USER
    assert to_operations(description) == (
        create(
            "Software\\Example",
            default("x"),
            value("Mode", "on"),
            open_existing("Child"),
        ),
    )


def test_root_defaults_to_local_machine() -> None:
    description = BatchDescription.model_validate({"operations": []})

    assert description.root is RootKey.LOCAL_MACHINE
    assert to_operations(description) == ()


@pytest.mark.parametrize(
    "payload",
    [
        {"operations": [{"type": "value", "data": "x", "extra": 1}]},
        {"operations": [{"type": "node", "name": ""}]},
        {"operations": [{"type": "node", "mode": "upsert", "name": "A"}]},
        {"operations": [{"type": "link", "name": "A"}]},
        {"root": "HKEY_NOWHERE", "operations": []},
    ],
)
def test_invalid_batch_files_are_rejected(tmp_path: Path, payload: object) -> None:
    with pytest.raises(BatchFileError, match="Invalid batch file"):
        load_batch_description(_write(tmp_path, payload))


def test_unreadable_batch_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(BatchFileError, match="Cannot read"):
        load_batch_description(tmp_path / "missing.json")
