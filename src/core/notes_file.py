# src/core/notes_file.py — v1
"""Read note snapshots from a notebook export file.

Format (camelCase keys, as exported by the note app):

    {"notebooks": [{"title": "Work", "notes": [
        {"id": "...", "title": "...", "content": "...", "createdAt": "2026-01-31T08:00:00Z"}
    ]}]}
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from notedigest.core.models import Note, NoteSource


class _ExportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExportedNote(_ExportModel):
    id: str
    title: str = ""
    content: str = ""
    created_at: str


class ExportedNotebook(_ExportModel):
    title: str = ""
    notes: list[ExportedNote] = Field(default_factory=list)


class NotebookExport(_ExportModel):
    notebooks: list[ExportedNotebook] = Field(default_factory=list)

    def note_sources(self) -> list[NoteSource]:
        """Flatten notebooks into (note, notebook title) pairs, file order."""
        return [
            NoteSource(
                note=Note(
                    id=n.id,
                    title=n.title,
                    content=n.content,
                    created_at=n.created_at,
                ),
                notebook_title=notebook.title,
            )
            for notebook in self.notebooks
            for n in notebook.notes
        ]


def load_note_sources(path: Path) -> list[NoteSource]:
    """Parse an export file into note sources.

    Raises:
        pydantic.ValidationError: If the file does not match the format.
        OSError: If the file cannot be read.
    """
    export = NotebookExport.model_validate_json(path.read_text(encoding="utf-8"))
    return export.note_sources()
