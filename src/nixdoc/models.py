"""Domain models for nixdoc."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DocComment(BaseModel):
    model_config = ConfigDict(frozen=True)

    doc: str
    doc_type: str | None = None
    example: str | None = None


class DocItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    comment: DocComment
    args: tuple[str, ...] = ()  # curry order, outermost parameter first


class ManualEntry(BaseModel):
    """One documented library function, ready for rendering."""

    model_config = ConfigDict(frozen=True)

    category: str
    name: str
    fn_type: str | None = None  # free text, never checked against the code
    description: tuple[str, ...]  # one paragraph per item, never empty
    example: str | None = None
    args: tuple[str, ...] = ()
