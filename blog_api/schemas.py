from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# --- Auth ---

class RegisterRequest(BaseModel):
    username: str = Field(max_length=100)
    email: str = Field(max_length=255)
    password: str = Field(min_length=1, max_length=72)
    bio: str = ""

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _strip_required(v).lower()


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()


# --- User ---

class AuthorSummary(BaseModel):
    id: int
    username: str


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    bio: str
    following: list[int] = []
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


# --- Comment ---

class CommentCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class CommentUpdate(CommentCreate):
    pass


class CommentResponse(BaseModel):
    id: int
    content: str
    author: AuthorSummary | None = None
    post: int
    created_at: datetime
    updated_at: datetime


# --- Post ---

class PostCreate(BaseModel):
    title: str = Field(max_length=300)
    content: str

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class PostUpdate(BaseModel):
    """
    Partial update. Any field sent overwrites the stored value; keys that
    are not post fields are dropped. Sending ``null`` for a field is
    rejected because every post field is required.
    """
    title: str | None = Field(None, max_length=300)
    content: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("title is required")
        return _strip_required(v)

    @field_validator("content")
    @classmethod
    def _content(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("content is required")
        return v


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    author: AuthorSummary | None = None
    comments: list[int] = []
    created_at: datetime
    updated_at: datetime


class PostDetail(PostResponse):
    comments: list[CommentResponse] = []


# --- Misc ---

class MessageResponse(BaseModel):
    message: str
