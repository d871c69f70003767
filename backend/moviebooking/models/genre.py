from sqlalchemy import Column, Integer, String
from moviebooking.core.database import Base


class Genre(Base):
    __tablename__ = "genres"

    genreid = Column(Integer, primary_key=True, autoincrement=False)
    genre = Column(String, nullable=False)
