from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdminProfile(CamelModel):
    uid: Optional[str] = None
    email: str = ""
    name: str = ""
    restaurant_name: str = ""
    restaurant_phone: str = ""
    role: str = "admin"
    created_at: Optional[datetime] = None


class AdminProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    restaurant_name: Optional[str] = None
    restaurant_phone: Optional[str] = None
    # Accepted only when unchanged; the address is fixed at sign-up
    email: Optional[str] = None


class AdminSignup(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    restaurant_name: str = ""
    restaurant_phone: str = ""
