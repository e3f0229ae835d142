'''
JWT payload model.
'''
from typing import Optional
from pydantic import BaseModel

class TokenPayload(BaseModel):
    """The decoded bearer token. 'sub' holds the user's email."""
    sub: Optional[str] = None
