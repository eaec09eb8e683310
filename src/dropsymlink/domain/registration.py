"""Registry layout that registers the drop handler with the shell."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final
from uuid import UUID

from dropsymlink.domain.batch import batch, create, default, open_existing, value

if TYPE_CHECKING:
    from dropsymlink.domain.model import Batch, MutationOp
    from dropsymlink.domain.ports import StoreHandle

CLASSES_CLSID_PATH: Final[str] = "SOFTWARE\\Classes\\CLSID"
DRAG_DROP_HANDLERS_PATH: Final[str] = "SOFTWARE\\Classes\\Directory\\ShellEx\\DragDropHandlers"
APPROVED_EXTENSIONS_PATH: Final[str] = (
    "SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Shell Extensions\\Approved"
)
IN_PROC_SERVER: Final[str] = "InProcServer32"
THREADING_MODEL: Final[str] = "ThreadingModel"
APARTMENT: Final[str] = "Apartment"


@dataclass(frozen=True, slots=True)
class ShellExtension:
    """Identity of the component being registered."""

    class_id: UUID
    name: str
    server_path: Path

    @property
    def class_id_text(self) -> str:
        return f"{{{str(self.class_id).upper()}}}"

    @property
    def factory_name(self) -> str:
        return f"{self.name} Factory"


def registration_operations(extension: ShellExtension) -> tuple[MutationOp, ...]:
    """Return the top-level operations, freshly built on every call."""

    clsid = extension.class_id_text
    return (
        create(
            f"{CLASSES_CLSID_PATH}\\{clsid}",
            default(extension.factory_name),
            create(
                IN_PROC_SERVER,
                default(str(extension.server_path)),
                value(THREADING_MODEL, APARTMENT),
            ),
        ),
        create(
            f"{DRAG_DROP_HANDLERS_PATH}\\{extension.name}",
            default(clsid),
        ),
        open_existing(
            APPROVED_EXTENSIONS_PATH,
            value(clsid, extension.name),
        ),
    )


def registration_batch(root: StoreHandle, extension: ShellExtension) -> Batch:
    return batch(root, *registration_operations(extension))
