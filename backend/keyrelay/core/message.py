# keyrelay/core/message.py

import logging
from typing import List, Optional

from keyrelay.core.errors import AuthError, NotFoundError, UnknownSenderError, ValidationError
from keyrelay.core.security import verify_api_key
from keyrelay.core.store import MessageRecord, RecordStore, UserRecord

logger = logging.getLogger(__name__)


def authenticate(user: UserRecord, api_key: Optional[str]):
    if not verify_api_key(api_key, user.token):
        logger.warning("Rejected api key for %s", user.username)
        raise AuthError()


def store_message(
    store: RecordStore,
    api_key: Optional[str],
    sender: str,
    recipient: str,
    ciphertext: str,
    encrypted_key: str,
    iv: str,
) -> MessageRecord:
    """Store an encrypted message on behalf of an authenticated sender.

    Only the sender is checked; the recipient does not have to exist.
    """
    if not all((sender, recipient, ciphertext, encrypted_key, iv)):
        raise ValidationError("missing fields")

    user = store.find_user(sender)
    if user is None:
        raise UnknownSenderError()

    authenticate(user, api_key)

    message = store.append_message(sender, recipient, ciphertext, encrypted_key, iv)
    logger.info("Stored message %s -> %s", sender, recipient)
    return message


def fetch_messages(store: RecordStore, username: str, api_key: Optional[str]) -> List[MessageRecord]:
    """Full message history addressed to ``username``, oldest first."""
    user = store.find_user(username)
    if user is None:
        raise NotFoundError("unknown user")

    authenticate(user, api_key)

    messages = store.list_messages_to(username)
    logger.info("Fetched %d messages for %s", len(messages), username)
    return messages


def serialize_message(message: MessageRecord) -> dict:
    return {
        "from": message.sender,
        "to": message.recipient,
        "ciphertext": message.ciphertext,
        "encryptedKey": message.encrypted_key,
        "iv": message.iv,
        "timestamp": message.timestamp.isoformat(),
    }
