from sqlalchemy import Column, Integer, String, Boolean, Float, JSON
from moviebooking.core.database import Base


class Movie(Base):
    """
    Movie catalog entry.

    genres and artists are stored as JSON lists of names; shows is a JSON
    list of show dicts ({theatre: {city, name}, language, show_timing,
    unit_price, available_seats}). Dates are ISO-8601 strings so they
    compare correctly as text.
    """
    __tablename__ = "movies"

    movieid = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String, nullable=False, index=True)
    published = Column(Boolean, nullable=False, default=False)
    released = Column(Boolean, nullable=False, default=False)
    poster_url = Column(String, nullable=False, default="")
    release_date = Column(String, nullable=True)
    publish_date = Column(String, nullable=True)
    artists = Column(JSON, nullable=False, default=list)
    genres = Column(JSON, nullable=False, default=list)
    duration = Column(Integer, nullable=False, default=0)
    critics_rating = Column(Float, nullable=False, default=0)
    trailer_url = Column(String, nullable=False, default="")
    wiki_url = Column(String, nullable=False, default="")
    storyline = Column(String, nullable=False, default="")
    shows = Column(JSON, nullable=False, default=list)
