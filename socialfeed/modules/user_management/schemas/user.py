from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialized with camelCase keys, read straight from ORM rows."""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class UserPublic(CamelModel):
    id: str
    email: str
    username: str
    name: str


class UserSummary(CamelModel):
    """Author card shown next to feed items"""
    id: str
    username: str
    name: str
    profile_image: Optional[str] = None


class Profile(CamelModel):
    id: str
    email: str
    username: str
    name: str
    bio: Optional[str] = None
    profile_image: Optional[str] = None


class ProfileUpdateResponse(BaseModel):
    message: str
    user: Profile
