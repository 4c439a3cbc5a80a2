from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    phone_number: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=20)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=20)


class AuthTokenResponse(CamelModel):
    id_token: str
    refresh_token: str
    # Firebase sends seconds as a string; keep whatever type arrived.
    expires_in: Union[int, str]


class AccountResponse(CamelModel):
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    email_verified: bool = False
    disabled: bool = False
    creation_timestamp: Optional[int] = None
