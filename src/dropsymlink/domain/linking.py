"""Symbolic links for items dropped onto a folder.

Mirrors what the shell drop handler does once its menu command is invoked:
one link per dropped item inside the target folder, renamed with a
``" (N)"`` suffix when the name is taken.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Final

from dropsymlink.domain.errors import E_ABORT, E_INVALIDARG, E_UNEXPECTED, S_OK

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

log = logging.getLogger(__name__)

MENU_TEXT: Final[str] = "Create Symlink"
RENAMED_SUFFIX: Final[re.Pattern[str]] = re.compile(r" \((\d+)\)$")

type PathPredicate = Callable[[Path], bool]
type ConfirmRename = Callable[[Path], bool]
type Notify = Callable[[str], None]


def _lexists(path: Path) -> bool:
    return os.path.lexists(path)


def menu_text(count: int) -> str:
    return MENU_TEXT + ("s" if count > 1 else "")


def next_free_link_path(path: Path, exists: PathPredicate = _lexists) -> Path:
    """Return ``path`` or the first free ``"<path> (N)"`` variant of it.

    The counter is appended to the whole name, extension included, and an
    existing counter is incremented rather than stacked.
    """

    if not exists(path):
        return path
    candidate = str(path)
    if RENAMED_SUFFIX.search(candidate) is None:
        candidate = f"{candidate} (1)"
    while exists(Path(candidate)):
        candidate = RENAMED_SUFFIX.sub(lambda match: f" ({int(match[1]) + 1})", candidate)
    return Path(candidate)


@dataclass(slots=True)
class LinkResult:
    """Outcome of one link run."""

    status: int = S_OK
    created: list[Path] = field(default_factory=list[Path])
    skipped: list[Path] = field(default_factory=list[Path])
    failed: list[Path] = field(default_factory=list[Path])

    @property
    def aborted(self) -> bool:
        return self.status == E_ABORT


def _refuse(path: Path) -> bool:
    _ = path
    return False


def _log_notice(message: str) -> None:
    log.warning("%s", message)


def create_links(
    sources: Iterable[Path],
    folder: Path,
    *,
    confirm_rename: ConfirmRename = _refuse,
    notify: Notify = _log_notice,
    exists: PathPredicate = _lexists,
) -> LinkResult:
    """Link every source into ``folder``.

    A taken name is only renamed when ``confirm_rename`` agrees; a refusal
    stops the run with ``E_ABORT`` and keeps the links made so far.
    """

    result = LinkResult()
    for source in sources:
        if not source.name:
            continue
        link_path = folder / source.name

        if exists(link_path):
            if not confirm_rename(link_path):
                log.info("Link path %s already exists, aborting", link_path)
                result.status = E_ABORT
                return result
            link_path = next_free_link_path(link_path, exists)

        if not source.exists():
            log.debug("Skipping missing source %s", source)
            result.skipped.append(source)
            continue

        try:
            os.symlink(source, link_path, target_is_directory=source.is_dir())
        except OSError as exc:
            notify(f"Error creating symlink:\n{exc}")
            result.failed.append(source)
            continue
        log.info("Linked %s -> %s", link_path, source)
        result.created.append(link_path)
    return result


class SymlinkDropHandler:
    """Collects a drop (target folder plus items) and links it on demand."""

    def __init__(self) -> None:
        self._folder: Path | None = None
        self._files: list[Path] = []

    def initialize(self, folder: Path | None, files: Iterable[Path]) -> int:
        if folder is None:
            return E_INVALIDARG
        dropped = list(files)
        if not dropped:
            return E_UNEXPECTED
        self._folder = folder
        self._files.extend(dropped)
        return S_OK

    @property
    def pending(self) -> tuple[Path, ...]:
        return tuple(self._files)

    def menu_text(self) -> str:
        return menu_text(len(self._files))

    def invoke(
        self,
        *,
        confirm_rename: ConfirmRename = _refuse,
        notify: Notify = _log_notice,
    ) -> LinkResult:
        """Link the pending items; the drop is consumed either way."""

        if self._folder is None:
            return LinkResult(status=E_UNEXPECTED)
        folder, files = self._folder, self._files
        self._folder, self._files = None, []
        return create_links(files, folder, confirm_rename=confirm_rename, notify=notify)
