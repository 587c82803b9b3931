# keyrelay/models/user.py

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from keyrelay.models.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)

    # Unique constraint is what keeps concurrent registrations from duplicating a user
    username = Column(String, unique=True, nullable=False, index=True)

    # PEM text as supplied by the client, never parsed server side
    public_key_pem = Column(Text, nullable=False)

    token = Column(String(64), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
