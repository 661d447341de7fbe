from sqlalchemy import BigInteger, ForeignKey, String, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from seat_hold.db.base import Base, BigIntPK
from seat_hold.models import TimestampMixin


class Theater(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    rooms: Mapped[list["Room"]] = relationship(back_populates="theater", cascade="all, delete-orphan")


class Room(Base, TimestampMixin):
    """A screening room. rows x cols is the seat layout grid."""
    __table_args__ = (
        UniqueConstraint("theater_id", "name", name="uix_room_theater_name"),
    )
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    theater_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("theater.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    rows: Mapped[int] = mapped_column(Integer, nullable=False)
    cols: Mapped[int] = mapped_column(Integer, nullable=False)
    theater: Mapped["Theater"] = relationship(back_populates="rooms")
    seats: Mapped[list["Seat"]] = relationship(back_populates="room", cascade="all, delete-orphan")
