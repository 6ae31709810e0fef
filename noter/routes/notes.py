"""
Noter Backend: Notes Route Handlers
=====================================

What:  POST /notes (create), GET /notes (list), GET /notes/{id} (detail).
How:   Validate input, build or look up notes through NoteRepository, and
       raise application exceptions that the handlers in main.py turn into
       plain-text error responses.

Validation order for create:
    1. Body must parse as a JSON object with a string title  → else 400
    2. Title must be non-empty                               → else 400
    3. Only then is the repository touched

The note id in GET /notes/{id} is taken as a string and parsed here, so a
malformed id is answered with 400 before any query runs. Accepted shapes:
    xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx
    {xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx}
    urn:uuid:xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx
    xxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx
"""

import logging
import re
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from noter.exceptions import DatabaseError, NoterError, NotFoundError, ValidationError
from noter.models.note import Note
from noter.repositories.note_repository import NoteRepository, get_note_repository
from noter.schemas.note import CreateNoteRequest, NoteResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["Notes"])

_HYPHENATED_UUID = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
NOTE_ID_PATTERN = re.compile(
    rf"(?:urn:uuid:)?{_HYPHENATED_UUID}|\{{{_HYPHENATED_UUID}\}}|[0-9a-f]{{32}}",
    re.IGNORECASE,
)


def parse_note_id(raw: str) -> UUID:
    """
    Parse a note id in one of the accepted shapes.

    Raises:
        ValidationError: Any other string, including ones uuid.UUID would
        tolerate (stray hyphens, doubled braces, a bare "uuid:" prefix).
    """
    if not NOTE_ID_PATTERN.fullmatch(raw):
        raise ValidationError(message="Invalid note ID", field="id")
    return UUID(raw.lower())


@router.post(
    "",
    response_model=NoteResponse,
    status_code=201,
    responses={
        400: {"description": "Malformed body or empty title"},
        500: {"description": "Note could not be stored"},
    },
    summary="Create a note",
)
async def create_note(
    body: CreateNoteRequest,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteResponse:
    if body.title == "":
        raise ValidationError(message="Title is required", field="title")

    note = Note.new(body.title)
    try:
        await repo.create_note(note)
    except NoterError as e:
        raise DatabaseError(
            message=f"Failed to create note: {e}",
            kind=e.kind,
            operation="create note",
            cause=e,
        ) from e

    return NoteResponse.model_validate(note)


@router.get(
    "",
    response_model=List[NoteResponse],
    responses={500: {"description": "Notes could not be read"}},
    summary="List all notes, newest first",
)
async def list_notes(
    repo: NoteRepository = Depends(get_note_repository),
) -> List[NoteResponse]:
    try:
        notes = await repo.get_all_notes()
    except NoterError as e:
        raise DatabaseError(
            message="Failed to get notes",
            kind=e.kind,
            operation="list notes",
            cause=e,
        ) from e

    return [NoteResponse.model_validate(note) for note in notes]


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses={
        400: {"description": "Malformed note id"},
        404: {"description": "Note not found"},
    },
    summary="Get a single note by ID",
)
async def get_note(
    note_id: str,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteResponse:
    parsed_id = parse_note_id(note_id)

    try:
        note = await repo.get_note_by_id(parsed_id)
    except NoterError as e:
        # Any lookup failure is reported as 404; store errors are still logged
        if not e.is_not_found:
            logger.error("Lookup of note %s failed: %s", parsed_id, str(e))
        raise NotFoundError(resource="note", resource_id=str(parsed_id)) from e

    return NoteResponse.model_validate(note)
