from typing import Any
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error the service answers with."""

    detail: Any
