from __future__ import annotations

from pydantic import BaseModel


class EmptyRequest(BaseModel):
    pass
