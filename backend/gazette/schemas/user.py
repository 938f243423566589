import re
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional
from gazette.core.passwords import PASSWORD_TOO_LONG, fits_bcrypt
from gazette.schemas.common import ActionResult

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Credentials(BaseModel):
    email: str = Field(max_length=180)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v


class UserRegister(Credentials):
    password: str = Field(min_length=8, max_length=72)

    @field_validator("password")
    @classmethod
    def within_bcrypt_limit(cls, v: str) -> str:
        if not fits_bcrypt(v):
            raise ValueError(PASSWORD_TOO_LONG)
        return v


class UserLogin(Credentials):
    pass


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=8, max_length=72)

    @field_validator("new_password")
    @classmethod
    def within_bcrypt_limit(cls, v: str) -> str:
        if not fits_bcrypt(v):
            raise ValueError(PASSWORD_TOO_LONG)
        return v


class User(BaseModel):
    id: int
    email: str
    roles: List[str]
    created_at: datetime

    class Config:
        from_attributes = True


class UserActionResult(ActionResult):
    user: Optional[User] = None
