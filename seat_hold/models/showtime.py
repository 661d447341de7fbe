from datetime import date, time
from sqlalchemy import BigInteger, Date, ForeignKey, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from seat_hold.db.base import Base, BigIntPK
from seat_hold.models import TimestampMixin


class Showtime(Base, TimestampMixin):
    """One movie playing at one theater. Its slots are the actual screenings."""
    __table_args__ = (
        UniqueConstraint("movie_id", "theater_id", name="uix_showtime_movie_theater"),
    )
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    movie_id: Mapped[int] = mapped_column(BigInteger, ForeignKey(
        "movie.id", ondelete="CASCADE"), nullable=False)
    theater_id: Mapped[int] = mapped_column(BigInteger, ForeignKey(
        "theater.id", ondelete="CASCADE"), nullable=False)
    movie: Mapped["Movie"] = relationship(back_populates="showtimes")
    slots: Mapped[list["ShowtimeSlot"]] = relationship(back_populates="showtime", cascade="all, delete-orphan")


class ShowtimeSlot(Base, TimestampMixin):
    __table_args__ = (
        UniqueConstraint("showtime_id", "room_id", "show_date", "start_time", name="uix_slot_instance"),
    )
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    showtime_id: Mapped[int] = mapped_column(BigInteger, ForeignKey(
        "showtime.id", ondelete="CASCADE"), index=True, nullable=False)
    room_id: Mapped[int] = mapped_column(BigInteger, ForeignKey(
        "room.id", ondelete="CASCADE"), nullable=False)
    show_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    showtime: Mapped["Showtime"] = relationship(back_populates="slots")
    room: Mapped["Room"] = relationship()
    seats: Mapped[list["ShowSeat"]] = relationship(back_populates="slot", cascade="all, delete-orphan")
