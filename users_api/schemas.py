from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class UserCreate(BaseModel):
    """Incoming create request.

    Missing and null fields decode to an empty string so the create rules
    can report them the same way as explicitly empty ones.
    """

    name: str = ""
    email: str = ""

    @field_validator("name", "email", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return "" if v is None else v


class UserUpdate(BaseModel):
    """Incoming update request.

    ``None`` (omitted or null) and ``""`` both mean "leave unchanged".
    """

    name: Optional[str] = None
    email: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class ErrorOut(BaseModel):
    error: str


class MessageOut(BaseModel):
    message: str
