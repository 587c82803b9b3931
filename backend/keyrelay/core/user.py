# keyrelay/core/user.py

import logging
from typing import List

from keyrelay.core.errors import NotFoundError, ValidationError
from keyrelay.core.security import generate_token
from keyrelay.core.store import RecordStore

logger = logging.getLogger(__name__)


def register_user(store: RecordStore, username: str, public_key_pem: str) -> str:
    """Register a user and return their API token.

    Registering an existing username returns the token issued the first
    time; the stored public key and token are never replaced.
    """
    if not username or not public_key_pem:
        raise ValidationError("username and publicKeyPem required")

    user, created = store.create_user_if_absent(username, public_key_pem, generate_token())
    if created:
        logger.info("Registered user %s", username)
    else:
        logger.info("User %s already registered, returning existing token", username)
    return user.token


def get_public_key(store: RecordStore, username: str) -> str:
    user = store.find_user(username)
    if user is None:
        raise NotFoundError("user not found")
    return user.public_key_pem


def list_users(store: RecordStore) -> List[str]:
    return store.list_usernames()
