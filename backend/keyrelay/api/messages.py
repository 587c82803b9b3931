# keyrelay/api/messages.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field

from keyrelay.api.deps import get_store
from keyrelay.core.errors import InternalError, RelayError
from keyrelay.core.message import fetch_messages, serialize_message, store_message
from keyrelay.core.store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class SendMessageSchema(BaseModel):
    sender: Optional[str] = Field(default=None, alias="from")
    recipient: Optional[str] = Field(default=None, alias="to")
    ciphertext: Optional[str] = None
    encrypted_key: Optional[str] = Field(default=None, alias="encryptedKey")
    iv: Optional[str] = None


@router.post("/send")
def send_message(
    payload: SendMessageSchema,
    x_api_key: Optional[str] = Header(default=None),
    store: RecordStore = Depends(get_store),
):
    try:
        store_message(
            store,
            x_api_key,
            sender=payload.sender,
            recipient=payload.recipient,
            ciphertext=payload.ciphertext,
            encrypted_key=payload.encrypted_key,
            iv=payload.iv,
        )
        return {"ok": True}
    except RelayError:
        raise
    except Exception:
        logger.exception("Storing message from %s failed", payload.sender)
        raise InternalError()


@router.get("/messages/{username:path}")
def receive_messages_endpoint(
    username: str,
    x_api_key: Optional[str] = Header(default=None),
    store: RecordStore = Depends(get_store),
):
    try:
        messages = fetch_messages(store, username, x_api_key)
        return {"messages": [serialize_message(m) for m in messages]}
    except RelayError:
        raise
    except Exception:
        logger.exception("Fetching messages for %s failed", username)
        raise InternalError()
