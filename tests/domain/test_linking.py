from __future__ import annotations

import os
from pathlib import Path

import pytest

from dropsymlink.domain import linking
from dropsymlink.domain.errors import E_ABORT, E_INVALIDARG, E_UNEXPECTED, S_OK
from dropsymlink.domain.linking import (
    SymlinkDropHandler,
    create_links,
    menu_text,
    next_free_link_path,
)


def test_menu_text_is_pluralised() -> None:
    assert menu_text(1) == "Create Symlink"
    assert menu_text(3) == "Create Symlinks"


def test_next_free_link_path_returns_free_path_unchanged() -> None:
    assert next_free_link_path(Path("/d/a.txt"), lambda _path: False) == Path("/d/a.txt")


def test_next_free_link_path_appends_counter_after_extension() -> None:
    taken = {Path("/d/a.txt"), Path("/d/a.txt (1)")}

    assert next_free_link_path(Path("/d/a.txt"), taken.__contains__) == Path("/d/a.txt (2)")


def test_next_free_link_path_increments_existing_counter() -> None:
    taken = {Path("/d/a (3)"), Path("/d/a (4)")}

    assert next_free_link_path(Path("/d/a (3)"), taken.__contains__) == Path("/d/a (5)")


@pytest.fixture
def drop(tmp_path: Path) -> tuple[Path, Path, Path]:
    sources = tmp_path / "sources"
    sources.mkdir()
    (sources / "notes.txt").write_text("hello")
    (sources / "photos").mkdir()
    target = tmp_path / "target"
    target.mkdir()
    return sources / "notes.txt", sources / "photos", target


def test_create_links_links_files_and_folders(drop: tuple[Path, Path, Path]) -> None:
    file_source, folder_source, target = drop

    result = create_links([file_source, folder_source], target)

    assert result.status == S_OK
    assert result.created == [target / "notes.txt", target / "photos"]
    assert (target / "notes.txt").is_symlink()
    assert (target / "notes.txt").read_text() == "hello"
    assert (target / "photos").is_symlink()
    assert (target / "photos").is_dir()


def test_create_links_aborts_when_rename_is_refused(drop: tuple[Path, Path, Path]) -> None:
    file_source, folder_source, target = drop
    (target / "notes.txt").write_text("taken")
    asked: list[Path] = []

    def refuse(path: Path) -> bool:
        asked.append(path)
        return False

    result = create_links([file_source, folder_source], target, confirm_rename=refuse)

    assert result.status == E_ABORT
    assert result.aborted
    assert asked == [target / "notes.txt"]
    assert not (target / "photos").exists()


def test_create_links_renames_when_confirmed(drop: tuple[Path, Path, Path]) -> None:
    file_source, _, target = drop
    (target / "notes.txt").write_text("taken")

    result = create_links([file_source], target, confirm_rename=lambda _path: True)

    assert result.created == [target / "notes.txt (1)"]
    assert (target / "notes.txt (1)").is_symlink()
    assert (target / "notes.txt").read_text() == "taken"


def test_create_links_skips_missing_sources(drop: tuple[Path, Path, Path]) -> None:
    file_source, _, target = drop
    missing = file_source.parent / "gone.txt"

    result = create_links([missing, file_source], target)

    assert result.skipped == [missing]
    assert result.created == [target / "notes.txt"]


def test_create_links_reports_failures_and_continues(
    monkeypatch: pytest.MonkeyPatch, drop: tuple[Path, Path, Path]
) -> None:
    file_source, folder_source, target = drop
    real_symlink = os.symlink
    notices: list[str] = []

    def flaky_symlink(src: Path, dst: Path, *, target_is_directory: bool = False) -> None:
        if Path(src) == file_source:
            raise PermissionError(1314, "A required privilege is not held by the client")
        real_symlink(src, dst, target_is_directory=target_is_directory)

    monkeypatch.setattr(linking.os, "symlink", flaky_symlink)

    result = create_links([file_source, folder_source], target, notify=notices.append)

    assert result.failed == [file_source]
    assert result.created == [target / "photos"]
    assert len(notices) == 1
    assert notices[0].startswith("Error creating symlink:\n")


def test_drop_handler_validates_drop() -> None:
    handler = SymlinkDropHandler()

    assert handler.initialize(None, [Path("a")]) == E_INVALIDARG
    assert handler.initialize(Path("target"), []) == E_UNEXPECTED
    assert handler.invoke().status == E_UNEXPECTED


def test_drop_handler_links_pending_items_once(drop: tuple[Path, Path, Path]) -> None:
    file_source, folder_source, target = drop
    handler = SymlinkDropHandler()

    assert handler.initialize(target, [file_source, folder_source]) == S_OK
    assert handler.menu_text() == "Create Symlinks"
    assert handler.pending == (file_source, folder_source)

    result = handler.invoke()

    assert result.status == S_OK
    assert len(result.created) == 2
    assert handler.pending == ()
    assert handler.invoke().status == E_UNEXPECTED
