# keyrelay/core/store.py

import itertools
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from keyrelay.models.message import Message
from keyrelay.models.user import User


@dataclass(frozen=True)
class UserRecord:
    username: str
    public_key_pem: str
    token: str
    created_at: datetime


@dataclass(frozen=True)
class MessageRecord:
    sender: str
    recipient: str
    ciphertext: str
    encrypted_key: str
    iv: str
    timestamp: datetime


class RecordStore(ABC):
    """Persistence capabilities the request handlers depend on."""

    @abstractmethod
    def find_user(self, username: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def create_user_if_absent(self, username: str, public_key_pem: str, token: str) -> Tuple[UserRecord, bool]:
        """Atomically insert a user unless one already exists.

        Returns the stored record and whether it was created by this call.
        """

    @abstractmethod
    def append_message(self, sender: str, recipient: str, ciphertext: str,
                       encrypted_key: str, iv: str) -> MessageRecord:
        ...

    @abstractmethod
    def list_messages_to(self, recipient: str) -> List[MessageRecord]:
        """All messages for ``recipient``, oldest first."""

    @abstractmethod
    def list_usernames(self) -> List[str]:
        ...


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _user_record(user: User) -> UserRecord:
    return UserRecord(
        username=user.username,
        public_key_pem=user.public_key_pem,
        token=user.token,
        created_at=_as_utc(user.created_at),
    )


def _message_record(message: Message) -> MessageRecord:
    return MessageRecord(
        sender=message.sender,
        recipient=message.recipient,
        ciphertext=message.ciphertext,
        encrypted_key=message.encrypted_key,
        iv=message.iv,
        timestamp=_as_utc(message.created_at),
    )


class SqlRecordStore(RecordStore):
    """Store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find_user(self, username):
        user = self.db.query(User).filter(User.username == username).first()
        if user is None:
            return None
        return _user_record(user)

    def create_user_if_absent(self, username, public_key_pem, token):
        existing = self.find_user(username)
        if existing is not None:
            return existing, False

        user = User(username=username, public_key_pem=public_key_pem, token=token)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost the race to a concurrent registration; the winner's row stands
            self.db.rollback()
            winner = self.find_user(username)
            if winner is None:
                raise
            return winner, False

        self.db.refresh(user)
        return _user_record(user), True

    def append_message(self, sender, recipient, ciphertext, encrypted_key, iv):
        message = Message(
            sender=sender,
            recipient=recipient,
            ciphertext=ciphertext,
            encrypted_key=encrypted_key,
            iv=iv,
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return _message_record(message)

    def list_messages_to(self, recipient):
        messages = (
            self.db.query(Message)
            .filter(Message.recipient == recipient)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )
        return [_message_record(m) for m in messages]

    def list_usernames(self):
        rows = self.db.query(User.username).order_by(User.id.asc()).all()
        return [row.username for row in rows]


class MemoryRecordStore(RecordStore):
    """Process-local store; a single lock serializes every write."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users = {}
        self._messages = []
        self._sequence = itertools.count()

    def find_user(self, username):
        with self._lock:
            return self._users.get(username)

    def create_user_if_absent(self, username, public_key_pem, token):
        with self._lock:
            existing = self._users.get(username)
            if existing is not None:
                return existing, False
            record = UserRecord(
                username=username,
                public_key_pem=public_key_pem,
                token=token,
                created_at=datetime.now(timezone.utc),
            )
            self._users[username] = record
            return record, True

    def append_message(self, sender, recipient, ciphertext, encrypted_key, iv):
        with self._lock:
            record = MessageRecord(
                sender=sender,
                recipient=recipient,
                ciphertext=ciphertext,
                encrypted_key=encrypted_key,
                iv=iv,
                timestamp=datetime.now(timezone.utc),
            )
            self._messages.append((next(self._sequence), record))
            return record

    def list_messages_to(self, recipient):
        with self._lock:
            matching = [(seq, m) for seq, m in self._messages if m.recipient == recipient]
        matching.sort(key=lambda item: (item[1].timestamp, item[0]))
        return [m for _, m in matching]

    def list_usernames(self):
        with self._lock:
            return list(self._users)
