# models/payment.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from db.extensions import db
from datetime import datetime


class Payment(db.Model):
    __tablename__ = 'payments'

    id = Column(Integer, primary_key=True)
    booking_id = Column(Integer, ForeignKey('bookings.id'), nullable=False)
    amount = Column(Integer, nullable=False)  # cents
    currency = Column(String(3), nullable=False)
    status = Column(String(50), nullable=False)
    stripe_payment_intent_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    booking = relationship('Booking', back_populates='payments')

    def __repr__(self):
        return f"<Payment booking_id={self.booking_id} amount={self.amount} {self.currency} status={self.status}>"
