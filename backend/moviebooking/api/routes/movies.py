from typing import Any, List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field
from moviebooking.api.dependencies import BodyInt, RecordId
from moviebooking.core.database import get_db
from moviebooking.services.catalog_service import movie_service

router = APIRouter(prefix="/movies", tags=["movies"])


class MovieCreate(BaseModel):
    movieid: Optional[BodyInt] = None
    title: Optional[str] = None
    published: Optional[bool] = None
    released: Optional[bool] = None
    poster_url: Optional[str] = None
    release_date: Optional[str] = None
    publish_date: Optional[str] = None
    artists: Optional[list] = None
    # Any: a non-list value is replaced with [] rather than rejected
    genres: Optional[Any] = None
    duration: Optional[BodyInt] = None
    critics_rating: Optional[float] = Field(default=None, alias="critic_rating")
    trailer_url: Optional[str] = None
    wiki_url: Optional[str] = None
    storyline: Optional[str] = Field(default=None, alias="story_line")
    shows: Optional[list] = None

    model_config = ConfigDict(populate_by_name=True)


class MovieUpdate(BaseModel):
    title: Optional[str] = None
    published: Optional[bool] = None
    released: Optional[bool] = None
    poster_url: Optional[str] = None
    release_date: Optional[str] = None
    publish_date: Optional[str] = None
    artists: Optional[Any] = None
    genres: Optional[Any] = None
    duration: Optional[BodyInt] = None
    critics_rating: Optional[float] = Field(default=None, alias="critic_rating")
    trailer_url: Optional[str] = None
    wiki_url: Optional[str] = None
    storyline: Optional[str] = Field(default=None, alias="story_line")
    shows: Optional[Any] = None

    model_config = ConfigDict(populate_by_name=True)


class MovieResponse(BaseModel):
    movieid: int
    title: str
    published: bool
    released: bool
    poster_url: str
    release_date: Optional[str] = None
    publish_date: Optional[str] = None
    artists: list
    genres: list
    duration: int
    critics_rating: float
    trailer_url: str
    wiki_url: str
    storyline: str
    shows: list

    model_config = ConfigDict(from_attributes=True)


class ShowResponse(BaseModel):
    theatre: dict
    language: str
    show_timing: str
    unit_price: float
    available_seats: int


def serialize_movie(movie) -> dict:
    return MovieResponse.model_validate(movie).model_dump()


@router.get("")
def list_movies(
    status: Optional[str] = None,
    title: Optional[str] = None,
    genres: Optional[str] = None,
    artists: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List movies filtered by status, title, genres, artists and release dates"""
    movies = movie_service.list_movies(
        db,
        status=status,
        title=title,
        genres=genres,
        artists=artists,
        start_date=start_date,
        end_date=end_date,
    )
    payload = [serialize_movie(movie) for movie in movies]
    return {"movies": payload, "page": 1, "limit": len(payload), "total": len(payload)}


@router.get("/{movie_id}", response_model=MovieResponse)
def get_movie(movie_id: RecordId, db: Session = Depends(get_db)):
    """Get a movie with display defaults filled in"""
    return movie_service.movie_detail(movie_service.get_movie(db, movie_id))


@router.get("/{movie_id}/shows", response_model=List[ShowResponse])
def get_shows(movie_id: RecordId, db: Session = Depends(get_db)):
    """Shows of a movie, normalized for display"""
    return movie_service.normalize_shows(movie_service.get_movie(db, movie_id))


@router.post("", status_code=201)
def create_movie(movie: MovieCreate, db: Session = Depends(get_db)):
    db_movie = movie_service.create_movie(db, movie.model_dump())
    return {"message": "Movie created successfully", "movie": serialize_movie(db_movie)}


@router.put("/{movie_id}")
def update_movie(movie_id: RecordId, movie_update: MovieUpdate, db: Session = Depends(get_db)):
    db_movie = movie_service.update_movie(db, movie_id, movie_update.model_dump(exclude_unset=True))
    return {"message": "Movie updated successfully", "movie": serialize_movie(db_movie)}


@router.delete("/{movie_id}")
def delete_movie(movie_id: RecordId, db: Session = Depends(get_db)):
    db_movie = movie_service.delete_movie(db, movie_id)
    return {"message": "Movie deleted successfully", "movie": serialize_movie(db_movie)}
