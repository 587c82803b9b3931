# keyrelay/models/message.py

from sqlalchemy import Column, DateTime, Integer, String, Text

from keyrelay.models.base import Base
from keyrelay.models.user import utcnow


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True)

    sender = Column(String, nullable=False)

    # Not a foreign key: messages to unknown recipients are accepted
    recipient = Column(String, nullable=False, index=True)

    # Opaque envelope fields, stored verbatim
    ciphertext = Column(Text, nullable=False)
    encrypted_key = Column(Text, nullable=False)
    iv = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
