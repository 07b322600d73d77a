"""
Journal Routes

Write entries (classified at write time) and list them.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from journal_insights.auth import get_current_user
from journal_insights.database import get_db
from journal_insights.models import User
from journal_insights.services.insights_client import InsightsClient, get_insights_client
from journal_insights.services.journal_service import (
    create_entry,
    get_entry,
    list_entries,
    serialize_entry,
    update_entry,
)

router = APIRouter(prefix="/api/journals", tags=["journals"])


class EntryCreateRequest(BaseModel):
    title: str
    content: str


class EntryUpdateRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


@router.get("")
async def get_journals(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the current user's entries, newest first."""
    return [serialize_entry(e) for e in list_entries(db, current_user.id)]


@router.post("")
def post_journal(
    data: EntryCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: InsightsClient = Depends(get_insights_client),
):
    """Create an entry. Classifier failures still save the entry, without emotions."""
    try:
        entry = create_entry(db, current_user.id, data.title, data.content, client)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return JSONResponse(serialize_entry(entry), status_code=201)


@router.put("/{entry_id}")
def put_journal(
    entry_id: int,
    data: EntryUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: InsightsClient = Depends(get_insights_client),
):
    """Edit an entry's title/content."""
    entry = get_entry(db, current_user.id, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Journal entry not found")

    try:
        entry = update_entry(db, entry, client, title=data.title, content=data.content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return serialize_entry(entry)
