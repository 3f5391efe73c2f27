"""Response envelope shared by every controller."""
from typing import Any

from pydantic import BaseModel


class EnvelopeData(BaseModel):
    result: Any = None
    message: str | None = None
    count: int | None = None
    total: int | None = None


class Envelope(BaseModel):
    """``{status, data}`` pair returned by controller methods.

    ``status`` is the HTTP status the routing layer answers with.
    """

    status: int
    data: EnvelopeData = EnvelopeData()

    @classmethod
    def of(cls, status: int, **data: Any) -> "Envelope":
        return cls(status=status, data=EnvelopeData(**data))
