# models/booking.py
from sqlalchemy import Column, Integer, String, Date, Time, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from db.extensions import db
from datetime import datetime

STATUS_BOOKED = 'BOOKED'
STATUS_CANCELLED = 'CANCELLED'
STATUS_COMPLETED = 'COMPLETED'

SERVICE_FULL_CUT = 'Full Cut'
SERVICE_LINEUP = 'Lineup'
SERVICE_MOBILE = 'Mobile'
VALID_SERVICES = (SERVICE_FULL_CUT, SERVICE_LINEUP, SERVICE_MOBILE)
# Services performed at the customer's address
ADDRESS_REQUIRED_SERVICES = (SERVICE_MOBILE,)


class Booking(db.Model):
    __tablename__ = 'bookings'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    availability_id = Column(
        Integer, ForeignKey('availability.id', ondelete='SET NULL'), nullable=True, index=True
    )
    service = Column(String(50), nullable=False)
    # Snapshot of the slot at booking time; not kept in sync with later slot edits
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    address = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=STATUS_BOOKED, index=True)
    stripe_payment_intent_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship('User', back_populates='bookings')
    slot = relationship('Slot', back_populates='bookings')
    payments = relationship('Payment', back_populates='booking')

    __table_args__ = (
        Index('idx_bookings_date', 'date', 'start_time', 'end_time'),
    )

    def __repr__(self):
        return f"<Booking id={self.id} user_id={self.user_id} {self.date} {self.start_time} status={self.status}>"

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'availability_id': self.availability_id,
            'service': self.service,
            'date': self.date.isoformat(),
            'start_time': self.start_time.strftime('%H:%M'),
            'end_time': self.end_time.strftime('%H:%M'),
            'address': self.address,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
