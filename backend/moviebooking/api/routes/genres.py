from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict
from moviebooking.api.dependencies import BodyInt, RecordId
from moviebooking.core.database import get_db
from moviebooking.services.catalog_service import genre_service

router = APIRouter(prefix="/genres", tags=["genres"])


class GenreCreate(BaseModel):
    genreid: Optional[BodyInt] = None
    genre: Optional[str] = None


class GenreUpdate(BaseModel):
    genre: Optional[str] = None


class GenreResponse(BaseModel):
    genreid: int
    genre: str

    model_config = ConfigDict(from_attributes=True)


def serialize_genre(genre) -> dict:
    return GenreResponse.model_validate(genre).model_dump()


@router.get("")
def list_genres(search: Optional[str] = None, db: Session = Depends(get_db)):
    """List genres, optionally filtered by name"""
    return {"genres": [serialize_genre(g) for g in genre_service.list_genres(db, search)]}


@router.post("", status_code=201)
def create_genre(genre: GenreCreate, db: Session = Depends(get_db)):
    db_genre = genre_service.create_genre(db, genre.model_dump())
    return {"message": "Genre created successfully", "genre": serialize_genre(db_genre)}


@router.get("/{genre_id}")
def get_genre(genre_id: RecordId, db: Session = Depends(get_db)):
    return {"genre": serialize_genre(genre_service.get_genre(db, genre_id))}


@router.put("/{genre_id}")
def update_genre(genre_id: RecordId, genre_update: GenreUpdate, db: Session = Depends(get_db)):
    db_genre = genre_service.update_genre(db, genre_id, genre_update.model_dump(exclude_unset=True))
    return {"message": "Genre updated successfully", "genre": serialize_genre(db_genre)}


@router.delete("/{genre_id}")
def delete_genre(genre_id: RecordId, db: Session = Depends(get_db)):
    db_genre = genre_service.delete_genre(db, genre_id)
    return {"message": "Genre deleted successfully", "genre": serialize_genre(db_genre)}
