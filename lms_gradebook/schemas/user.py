from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from lms_gradebook.core.config import FULL_NAME_MAX_LENGTH

Role = Literal["student", "instructor", "admin"]


class UserCreate(BaseModel):
    email: EmailStr
    # bcrypt only hashes the first 72 bytes
    password: str = Field(min_length=8, max_length=72)
    full_name: str | None = Field(default=None, max_length=FULL_NAME_MAX_LENGTH)


class UserRead(BaseModel):
    id: str
    email: EmailStr
    full_name: str | None = None
    display_name: str
    role: Role

    class Config:
        from_attributes = True
