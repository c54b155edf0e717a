"""The persisted store envelope.

A store writes its whole state as one JSON string per principal and storage:
``{"state": {...}, "version": 0}``. The gateway and the storage adapter treat
that string as an opaque blob; only stores and the pre-hydration loader parse
it.
"""

from typing import Any

from pydantic import BaseModel


class PersistedEnvelope(BaseModel):
    state: dict[str, Any]
    version: int = 0
