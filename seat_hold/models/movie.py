from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from seat_hold.db.base import Base, BigIntPK
from seat_hold.models import TimestampMixin


class Movie(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    duration_mins: Mapped[int] = mapped_column(Integer, nullable=False)
    showtimes: Mapped[list["Showtime"]] = relationship(
        back_populates="movie", cascade="all, delete-orphan")
