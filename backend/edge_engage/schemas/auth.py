# edge_engage/schemas/auth.py
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class MagicLinkIn(BaseModel):
    email: EmailStr
    redirect: Optional[str] = Field(default=None, max_length=2000)


class MessageOut(BaseModel):
    message: str


class LoginPageOut(BaseModel):
    message: str
    redirect: str
