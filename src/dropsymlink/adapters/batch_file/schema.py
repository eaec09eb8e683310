"""Pydantic models describing declarative batch files."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dropsymlink.domain.model import NodeMode
from dropsymlink.domain.ports import RootKey


class BatchFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ValuePayload(BatchFileModel):
    type: Literal["value"]
    name: str | None = None
    data: str

    @field_validator("name", mode="before")
    @classmethod
    def _blank_to_default(cls, value: object) -> object:
        if isinstance(value, str) and not value:
            return None
        return value


class NodePayload(BatchFileModel):
    type: Literal["node"]
    mode: NodeMode = NodeMode.CREATE
    name: str = Field(min_length=1)
    operations: list[OperationPayload] = Field(default_factory=list)


OperationPayload = Annotated[ValuePayload | NodePayload, Field(discriminator="type")]

NodePayload.model_rebuild()


class BatchDescription(BatchFileModel):
    root: RootKey = RootKey.LOCAL_MACHINE
    operations: list[OperationPayload]

