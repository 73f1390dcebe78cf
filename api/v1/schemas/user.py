from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


class RegisterUserParams(BaseModel):
    name: str = Field(..., min_length=1, description="Full name of the new user")
    email: EmailStr = Field(..., description="Email address of the new user")
    api_key: str | None = Field(
        None,
        min_length=1,
        description="Explicit API key; a random one is generated when omitted",
    )
    is_admin: bool = Field(False, description="Whether the user has admin privileges")

    model_config = ConfigDict(extra="forbid")


class RevokeUserParams(BaseModel):
    user_id: str | None = Field(None, min_length=1, description="ID of the user to revoke")
    email: EmailStr | None = Field(None, description="Email of the user to revoke")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _exactly_one_selector(self) -> "RevokeUserParams":
        if (self.user_id is None) == (self.email is None):
            raise ValueError("Exactly one of user_id or email must be provided")
        return self
