# keyrelay/api/deps.py

from fastapi import Depends
from sqlalchemy.orm import Session

from keyrelay import config
from keyrelay.core.store import MemoryRecordStore, SqlRecordStore
from keyrelay.infra.database import get_db

# Shared by every request when running with KEYRELAY_STORE=memory
memory_store = MemoryRecordStore()


def get_store(db: Session = Depends(get_db)):
    """FastAPI dependency providing the configured record store."""
    # Sessions connect lazily, so the memory backend never touches the database
    if config.STORE_BACKEND == "memory":
        return memory_store
    return SqlRecordStore(db)
