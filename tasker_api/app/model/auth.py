""" Defines the authentication pydantic models. """

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from .enums import Role
from .user import User


class TokenClaims(BaseModel):
    """The claims carried by access and refresh tokens, keyed as on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
    email: str
    role: Role

    def to_claims(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class Actor(BaseModel):
    """The authenticated identity making a request."""

    id: int
    email: str
    role: Role

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "Actor":
        return cls(id=claims.user_id, email=claims.email, role=claims.role)


class TokenPair(BaseModel):
    token: str
    refresh_token: str


class AuthResponse(TokenPair):
    user: User


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str
