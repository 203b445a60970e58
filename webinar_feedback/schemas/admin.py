from datetime import datetime

from pydantic import BaseModel


class AdminLoginRequest(BaseModel):
    password: str


class AdminLoginResponse(BaseModel):
    success: bool = True
    token: str
    expires_at: datetime
