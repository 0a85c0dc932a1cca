# api/models/auth.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AuthUrl(BaseModel):
    url: str
    redirect_uri: str


class AuthStatus(BaseModel):
    authenticated: bool
    has_refresh_token: bool
    expires_at: Optional[datetime] = None


class AuthResult(BaseModel):
    status: str
    expires_at: Optional[datetime] = None
