from pydantic import BaseModel, field_validator


class LoginRequest(BaseModel):
    role: str
    identifier: str
    password: str

    @field_validator('identifier')
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Username or email is required.')
        return normalized


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'
    user_id: int
    role: str
    display_name: str


class IdentityResponse(BaseModel):
    subject: str
    role: str
    user_id: int


class TokenValidationResponse(BaseModel):
    valid: bool
    state: str
    message: str | None = None
    role: str | None = None
    user_id: int | None = None
    subject: str | None = None
