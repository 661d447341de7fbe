from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, String, Enum as SAEnum, UniqueConstraint
from sqlalchemy.orm import mapped_column, Mapped, relationship
from seat_hold.db.base import Base, BigIntPK
from seat_hold.models import TimestampMixin


class SeatType(str, Enum):
    NORMAL = "normal"
    VIP = "vip"
    COUPLE = "couple"
    FOUR_DX = "4dx"


class ShowSeatStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    HELD = "HELD"
    SOLD = "SOLD"
    MAINTENANCE = "MAINTENANCE"


seat_type_enum = SAEnum(
    SeatType, name="seat_type_enum", values_callable=lambda e: [m.value for m in e])


class Seat(Base, TimestampMixin):
    """Room template seat. The type never changes between bookings."""
    __table_args__ = (
        UniqueConstraint("room_id", "seat_code", name="uix_room_seat_code"),
    )
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    room_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("room.id", ondelete="CASCADE"), index=True, nullable=False)
    seat_code: Mapped[str] = mapped_column(String(10), nullable=False)
    row_label: Mapped[str] = mapped_column(String(5), nullable=False)
    seat_number: Mapped[int] = mapped_column(Integer, nullable=False)
    seat_type: Mapped[SeatType] = mapped_column(
        seat_type_enum, nullable=False, default=SeatType.NORMAL)
    is_maintenance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    room: Mapped["Room"] = relationship(back_populates="seats")


class ShowSeat(Base, TimestampMixin):
    """
    Seat record of one showtime slot. Only the reservation crud writes
    status, held_by, held_at, hold_expires_at and order_id.
    """
    __table_args__ = (
        UniqueConstraint("slot_id", "seat_code", name="uix_slot_seat_code"),
    )
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    slot_id: Mapped[int] = mapped_column(BigInteger, ForeignKey(
        "showtimeslot.id", ondelete="CASCADE"), index=True, nullable=False)
    seat_code: Mapped[str] = mapped_column(String(10), nullable=False)
    row_label: Mapped[str] = mapped_column(String(5), nullable=False)
    seat_number: Mapped[int] = mapped_column(Integer, nullable=False)
    seat_type: Mapped[SeatType] = mapped_column(seat_type_enum, nullable=False)
    status: Mapped[ShowSeatStatus] = mapped_column(SAEnum(
        ShowSeatStatus, name="show_seat_status_enum"), nullable=False, default=ShowSeatStatus.AVAILABLE, index=True)
    held_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    held_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    hold_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    order_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    version: Mapped[int] = mapped_column(default=1, nullable=False)
    slot: Mapped["ShowtimeSlot"] = relationship(back_populates="seats")
