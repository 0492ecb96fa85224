from typing import Any, Optional

from pydantic import BaseModel


# Body of every error response
class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None
