"""Render controller envelopes as HTTP responses."""
from fastapi import status
from fastapi.responses import JSONResponse, Response

from uboard.schemas.common import Envelope


def render(envelope: Envelope) -> Response:
    if envelope.status == status.HTTP_204_NO_CONTENT:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return JSONResponse(
        status_code=envelope.status,
        content=envelope.model_dump(mode="json", exclude_none=True),
    )
