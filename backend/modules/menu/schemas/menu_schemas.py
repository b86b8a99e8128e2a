# backend/modules/menu/schemas/menu_schemas.py

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class MenuCategory(str, Enum):
    APPETIZER = "Appetizer"
    MAIN_COURSE = "Main Course"
    DESSERT = "Dessert"
    BEVERAGE = "Beverage"
    SALAD = "Salad"
    SOUP = "Soup"


class MenuItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: MenuCategory = MenuCategory.APPETIZER
    price: float = Field(..., ge=0)
    image: str = ""
    is_veg: bool = False
    rating: Optional[float] = Field(None, ge=0, le=5)
    reviews: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MenuItemCreate(MenuItemBase):
    @field_validator("name")
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Please fill in name and price")
        return v.strip()


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[MenuCategory] = None
    price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None
    is_veg: Optional[bool] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    reviews: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MenuItem(MenuItemBase):
    """Stored menu item. Older documents may lack fields the form requires."""

    id: str
    name: str = ""
    category: str = MenuCategory.APPETIZER.value
    price: float = 0
