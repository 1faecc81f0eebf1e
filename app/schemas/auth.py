from pydantic import BaseModel, EmailStr, Field, field_validator


def _validate_password_length(value: str) -> str:
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password too long (max 72 bytes)")
    return value


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        return _validate_password_length(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        return _validate_password_length(value)


class RefreshRequest(BaseModel):
    refresh_token: str


class AuthResponse(TokenPair):
    user_id: int
    username: str
    email: EmailStr
