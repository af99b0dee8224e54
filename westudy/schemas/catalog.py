from typing import Optional
from pydantic import AliasChoices, BaseModel, Field


class Category(BaseModel):
    id: str
    label: str
    description: Optional[str] = None
    icon: Optional[str] = Field(default=None, validation_alias=AliasChoices("icon_name", "icon"))

    class Config:
        from_attributes = True


class Amenity(BaseModel):
    id: str
    name: str
    icon: Optional[str] = Field(default=None, validation_alias=AliasChoices("icon_name", "icon"))

    class Config:
        from_attributes = True


class UniversityArea(BaseModel):
    id: str
    name: str
    acronym: str
    city: str
    neighborhood: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    class Config:
        from_attributes = True


# Compact university for listing cards
class UniversitySummary(BaseModel):
    name: str
    acronym: str
    city: str

    class Config:
        from_attributes = True
