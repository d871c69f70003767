import math
from typing import Any, Dict, List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from moviebooking.core.database import store_errors
from moviebooking.core.errors import NotFound, ValidationError
from moviebooking.models.artist import Artist
from moviebooking.models.genre import Genre
from moviebooking.models.movie import Movie

EMPTY_UPDATE_MESSAGE = "Update data cannot be empty"


def split_csv(value: Optional[str]) -> List[str]:
    """Split a comma-separated query value, dropping blanks"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def contains_pattern(value: str) -> str:
    return f"%{value}%"


def _to_number(value: Any, kind: type):
    """Coerce a stored show value to kind, falling back to 0"""
    if isinstance(value, bool):
        return kind(0)
    try:
        number = kind(value)
    except (TypeError, ValueError, OverflowError):
        return kind(0)
    return number if math.isfinite(number) else kind(0)


def clean_changes(changes: Dict[str, Any], list_fields: tuple = ()) -> Dict[str, Any]:
    """Drop null fields and replace non-list values of list fields with []"""
    cleaned = {name: value for name, value in changes.items() if value is not None}
    for name in list_fields:
        if name in cleaned and not isinstance(cleaned[name], list):
            cleaned[name] = []
    return cleaned


def _apply(db: Session, record, changes: Dict[str, Any], action: str):
    with store_errors(db, action):
        for name, value in changes.items():
            setattr(record, name, value)
        db.commit()
        db.refresh(record)
    return record


def _add(db: Session, record, action: str):
    with store_errors(db, action):
        db.add(record)
        db.commit()
        db.refresh(record)
    return record


def _remove(db: Session, record, action: str):
    with store_errors(db, action):
        db.delete(record)
        db.commit()
    return record


class ArtistService:
    @staticmethod
    def list_artists(
        db: Session,
        search: Optional[str] = None,
        name: Optional[str] = None,
        page: int = 1,
        limit: int = 5,
    ) -> List[Artist]:
        """Filter by name fragments, then return one page"""
        query = db.query(Artist)

        if search:
            query = query.filter(or_(
                Artist.first_name.ilike(contains_pattern(search)),
                Artist.last_name.ilike(contains_pattern(search)),
            ))

        if name:
            # "First Last" - each part narrows its own column
            parts = name.strip().split(" ")
            if parts[0]:
                query = query.filter(Artist.first_name.ilike(contains_pattern(parts[0])))
            if len(parts) > 1 and parts[1]:
                query = query.filter(Artist.last_name.ilike(contains_pattern(parts[1])))

        with store_errors(db, "retrieving artists"):
            return (
                query.order_by(Artist.artistid)
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )

    @staticmethod
    def get_artist(db: Session, artist_id: int) -> Artist:
        with store_errors(db, "retrieving artist"):
            artist = db.query(Artist).filter(Artist.artistid == artist_id).first()
        if not artist:
            raise NotFound(f"Artist not found with id {artist_id}")
        return artist

    @staticmethod
    def create_artist(db: Session, data: Dict[str, Any]) -> Artist:
        if not data.get("first_name"):
            raise ValidationError("First name is required")
        if not data.get("last_name"):
            raise ValidationError("Last name is required")
        if not data.get("artistid"):
            raise ValidationError("Artist ID is required")

        artist = Artist(
            artistid=data["artistid"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            wiki_url=data.get("wiki_url") or "",
            profile_url=data.get("profile_url") or "",
            movies=data.get("movies") if isinstance(data.get("movies"), list) else [],
        )
        return _add(db, artist, "creating artist")

    @staticmethod
    def update_artist(db: Session, artist_id: int, changes: Dict[str, Any]) -> Artist:
        changes = clean_changes(changes, ("movies",))
        if not changes:
            raise ValidationError(EMPTY_UPDATE_MESSAGE)

        with store_errors(db, "updating artist"):
            artist = db.query(Artist).filter(Artist.artistid == artist_id).first()
        if not artist:
            raise NotFound(f"Cannot update Artist with id={artist_id}. Artist not found.")
        return _apply(db, artist, changes, "updating artist")

    @staticmethod
    def delete_artist(db: Session, artist_id: int) -> Artist:
        with store_errors(db, "deleting artist"):
            artist = db.query(Artist).filter(Artist.artistid == artist_id).first()
        if not artist:
            raise NotFound(f"Cannot delete Artist with id={artist_id}. Artist not found.")
        return _remove(db, artist, "deleting artist")


class GenreService:
    @staticmethod
    def list_genres(db: Session, search: Optional[str] = None) -> List[Genre]:
        query = db.query(Genre)
        if search:
            query = query.filter(Genre.genre.ilike(contains_pattern(search)))
        with store_errors(db, "retrieving genres"):
            return query.order_by(Genre.genreid).all()

    @staticmethod
    def get_genre(db: Session, genre_id: int) -> Genre:
        with store_errors(db, "retrieving genre"):
            genre = db.query(Genre).filter(Genre.genreid == genre_id).first()
        if not genre:
            raise NotFound(f"Genre not found with id {genre_id}")
        return genre

    @staticmethod
    def create_genre(db: Session, data: Dict[str, Any]) -> Genre:
        if not data.get("genre"):
            raise ValidationError("Genre name is required")
        if not data.get("genreid"):
            raise ValidationError("Genre ID is required")
        return _add(db, Genre(genreid=data["genreid"], genre=data["genre"]), "creating genre")

    @staticmethod
    def update_genre(db: Session, genre_id: int, changes: Dict[str, Any]) -> Genre:
        changes = clean_changes(changes)
        if not changes:
            raise ValidationError(EMPTY_UPDATE_MESSAGE)
        with store_errors(db, "updating genre"):
            genre = db.query(Genre).filter(Genre.genreid == genre_id).first()
        if not genre:
            raise NotFound(f"Cannot update Genre with id={genre_id}. Genre not found.")
        return _apply(db, genre, changes, "updating genre")

    @staticmethod
    def delete_genre(db: Session, genre_id: int) -> Genre:
        with store_errors(db, "deleting genre"):
            genre = db.query(Genre).filter(Genre.genreid == genre_id).first()
        if not genre:
            raise NotFound(f"Cannot delete Genre with id={genre_id}. Genre not found.")
        return _remove(db, genre, "deleting genre")


class MovieService:
    @staticmethod
    def list_movies(
        db: Session,
        status: Optional[str] = None,
        title: Optional[str] = None,
        genres: Optional[str] = None,
        artists: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Movie]:
        query = db.query(Movie)

        if status:
            status_lower = status.lower()
            if status_lower == "published":
                query = query.filter(Movie.published.is_(True))
            elif status_lower == "released":
                query = query.filter(Movie.released.is_(True))

        if title:
            query = query.filter(Movie.title.ilike(contains_pattern(title)))
        if start_date:
            query = query.filter(Movie.release_date >= start_date)
        if end_date:
            query = query.filter(Movie.release_date <= end_date)

        with store_errors(db, "retrieving movies"):
            movies = query.order_by(Movie.movieid).all()

        # JSON list membership is not portable across backends, filter here
        genre_list = set(split_csv(genres))
        artist_list = set(split_csv(artists))
        if genre_list:
            movies = [m for m in movies if genre_list.intersection(m.genres or [])]
        if artist_list:
            movies = [m for m in movies if artist_list.intersection(m.artists or [])]
        return movies

    @staticmethod
    def get_movie(db: Session, movie_id: int) -> Movie:
        with store_errors(db, "retrieving movie"):
            movie = db.query(Movie).filter(Movie.movieid == movie_id).first()
        if not movie:
            raise NotFound(f"Movie not found with id {movie_id}")
        return movie

    @staticmethod
    def movie_detail(movie: Movie) -> Dict[str, Any]:
        """Movie payload with defaults filled in for optional display fields"""
        return {
            "movieid": movie.movieid,
            "title": movie.title,
            "published": movie.published,
            "released": movie.released,
            "poster_url": movie.poster_url,
            "release_date": movie.release_date,
            "publish_date": movie.publish_date,
            "artists": movie.artists or [],
            "genres": movie.genres if isinstance(movie.genres, list) else [],
            "duration": movie.duration,
            "critics_rating": movie.critics_rating or 0,
            "trailer_url": movie.trailer_url,
            "wiki_url": movie.wiki_url,
            "storyline": movie.storyline or "No storyline available",
            "shows": movie.shows or [],
        }

    @staticmethod
    def normalize_shows(movie: Movie) -> List[Dict[str, Any]]:
        shows = []
        for show in movie.shows or []:
            # Entries that are not objects carry no show data
            if not isinstance(show, dict):
                continue
            theatre = show.get("theatre")
            if not isinstance(theatre, dict):
                theatre = {}
            shows.append({
                "theatre": {
                    "city": theatre.get("city") or "Unknown",
                    "name": theatre.get("name") or "Unknown",
                },
                "language": str(show.get("language") or "Unknown"),
                "show_timing": str(show.get("show_timing") or "Unknown"),
                "unit_price": _to_number(show.get("unit_price"), float),
                "available_seats": _to_number(show.get("available_seats"), int),
            })
        return shows

    @staticmethod
    def create_movie(db: Session, data: Dict[str, Any]) -> Movie:
        if not data.get("title") or not data.get("movieid"):
            raise ValidationError("Movie title and ID are required")

        movie = Movie(
            movieid=data["movieid"],
            title=data["title"],
            published=bool(data.get("published")),
            released=bool(data.get("released")),
            poster_url=data.get("poster_url") or "",
            release_date=data.get("release_date"),
            publish_date=data.get("publish_date"),
            artists=data.get("artists") or [],
            genres=data.get("genres") if isinstance(data.get("genres"), list) else [],
            duration=data.get("duration") or 0,
            critics_rating=data.get("critics_rating") or 0,
            trailer_url=data.get("trailer_url") or "",
            wiki_url=data.get("wiki_url") or "",
            storyline=data.get("storyline") or "",
            shows=data.get("shows") or [],
        )
        return _add(db, movie, "creating movie")

    @staticmethod
    def update_movie(db: Session, movie_id: int, changes: Dict[str, Any]) -> Movie:
        changes = clean_changes(changes, ("genres", "artists", "shows"))
        if not changes:
            raise ValidationError(EMPTY_UPDATE_MESSAGE)

        with store_errors(db, "updating movie"):
            movie = db.query(Movie).filter(Movie.movieid == movie_id).first()
        if not movie:
            raise NotFound(f"Cannot update Movie with id={movie_id}. Movie not found.")
        return _apply(db, movie, changes, "updating movie")

    @staticmethod
    def delete_movie(db: Session, movie_id: int) -> Movie:
        with store_errors(db, "deleting movie"):
            movie = db.query(Movie).filter(Movie.movieid == movie_id).first()
        if not movie:
            raise NotFound(f"Cannot delete Movie with id={movie_id}. Movie not found.")
        return _remove(db, movie, "deleting movie")


artist_service = ArtistService()
genre_service = GenreService()
movie_service = MovieService()
