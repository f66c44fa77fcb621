# models/availability.py
from sqlalchemy import Column, Integer, Boolean, Date, Time, DateTime, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from db.extensions import db
from datetime import datetime


class Slot(db.Model):
    """One bookable interval on a calendar date. Times are local wall-clock."""
    __tablename__ = 'availability'

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_open = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    bookings = relationship('Booking', back_populates='slot', passive_deletes=True)

    __table_args__ = (
        UniqueConstraint('date', 'start_time', 'end_time', name='uq_availability_interval'),
        Index('idx_availability_open', 'is_open', 'date'),
    )

    def __repr__(self):
        return f"<Slot id={self.id} {self.date} {self.start_time}-{self.end_time} open={self.is_open}>"

    def to_dict(self, is_booked=None):
        data = {
            'id': self.id,
            'date': self.date.isoformat(),
            'start_time': self.start_time.strftime('%H:%M'),
            'end_time': self.end_time.strftime('%H:%M'),
            'is_open': bool(self.is_open),
        }
        if is_booked is not None:
            data['is_booked'] = bool(is_booked)
        return data
