# models/user.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from db.extensions import db
from datetime import datetime

ROLE_USER = 'USER'
ROLE_OWNER = 'OWNER'


class User(db.Model):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(10), nullable=False, default=ROLE_USER)
    created_at = Column(DateTime, default=datetime.utcnow)

    bookings = relationship('Booking', back_populates='user')
    reviews = relationship('Review', back_populates='user')

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"

    def to_public_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
        }
