from sqlalchemy import Column, Integer, String, JSON
from moviebooking.core.database import Base


class Artist(Base):
    __tablename__ = "artists"

    artistid = Column(Integer, primary_key=True, autoincrement=False)
    first_name = Column(String, nullable=False, index=True)
    last_name = Column(String, nullable=False, index=True)
    wiki_url = Column(String, nullable=False, default="")
    profile_url = Column(String, nullable=False, default="")
    movies = Column(JSON, nullable=False, default=list)
