# keyrelay/api/users.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from keyrelay.api.deps import get_store
from keyrelay.core.errors import InternalError, RelayError
from keyrelay.core.limiter import PUBLIC_KEY_LIMIT, limiter
from keyrelay.core.store import RecordStore
from keyrelay.core.user import get_public_key, list_users, register_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class RegisterUserSchema(BaseModel):
    username: Optional[str] = None
    public_key_pem: Optional[str] = Field(default=None, alias="publicKeyPem")


@router.post("/register")
def register_user_endpoint(payload: RegisterUserSchema, store: RecordStore = Depends(get_store)):
    try:
        token = register_user(store, payload.username, payload.public_key_pem)
        return {"token": token}
    except RelayError:
        raise
    except Exception:
        logger.exception("Registration failed for %s", payload.username)
        raise InternalError()


@router.get("/publicKey/{username:path}")
@limiter.limit(PUBLIC_KEY_LIMIT)
def get_user_public_key(request: Request, username: str, store: RecordStore = Depends(get_store)):
    try:
        return {"publicKeyPem": get_public_key(store, username)}
    except RelayError:
        raise
    except Exception:
        logger.exception("Public key lookup failed for %s", username)
        raise InternalError()


@router.get("/users")
def list_users_endpoint(store: RecordStore = Depends(get_store)):
    try:
        return {"users": list_users(store)}
    except RelayError:
        raise
    except Exception:
        logger.exception("Listing users failed")
        raise InternalError()
