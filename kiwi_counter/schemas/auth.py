from typing import Optional

from pydantic import BaseModel


class CredentialsRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
