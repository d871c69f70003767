from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict
from moviebooking.core.config import settings
from moviebooking.api.dependencies import MAX_PAGE_VALUE, BodyInt, RecordId
from moviebooking.core.database import get_db
from moviebooking.services.catalog_service import artist_service

router = APIRouter(prefix="/artists", tags=["artists"])


class ArtistCreate(BaseModel):
    artistid: Optional[BodyInt] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    wiki_url: Optional[str] = None
    profile_url: Optional[str] = None
    # Any: a non-list value is replaced with [] rather than rejected
    movies: Optional[Any] = None


class ArtistUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    wiki_url: Optional[str] = None
    profile_url: Optional[str] = None
    movies: Optional[Any] = None


class ArtistResponse(BaseModel):
    artistid: int
    first_name: str
    last_name: str
    wiki_url: str
    profile_url: str
    movies: list

    model_config = ConfigDict(from_attributes=True)


def serialize_artist(artist) -> dict:
    return ArtistResponse.model_validate(artist).model_dump()


@router.get("", response_model=List[ArtistResponse])
def list_artists(
    search: Optional[str] = None,
    name: Optional[str] = None,
    page: int = Query(1, ge=1, le=MAX_PAGE_VALUE),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_VALUE),
    db: Session = Depends(get_db)
):
    """List artists, optionally filtered by name"""
    return artist_service.list_artists(
        db,
        search=search,
        name=name,
        page=page,
        limit=limit or settings.DEFAULT_PAGE_LIMIT,
    )


@router.post("", status_code=201)
def create_artist(artist: ArtistCreate, db: Session = Depends(get_db)):
    """Create an artist"""
    db_artist = artist_service.create_artist(db, artist.model_dump())
    return {"message": "Artist created successfully", "artist": serialize_artist(db_artist)}


@router.get("/{artist_id}")
def get_artist(artist_id: RecordId, db: Session = Depends(get_db)):
    """Get an artist by artistid"""
    return {"artist": serialize_artist(artist_service.get_artist(db, artist_id))}


@router.put("/{artist_id}")
def update_artist(artist_id: RecordId, artist_update: ArtistUpdate, db: Session = Depends(get_db)):
    """Update an artist"""
    db_artist = artist_service.update_artist(
        db, artist_id, artist_update.model_dump(exclude_unset=True))
    return {"message": "Artist updated successfully", "artist": serialize_artist(db_artist)}


@router.delete("/{artist_id}")
def delete_artist(artist_id: RecordId, db: Session = Depends(get_db)):
    """Delete an artist"""
    db_artist = artist_service.delete_artist(db, artist_id)
    return {"message": "Artist deleted successfully", "artist": serialize_artist(db_artist)}
