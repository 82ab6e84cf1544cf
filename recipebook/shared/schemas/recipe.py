from typing import List, Optional

from pydantic import BaseModel, Field


class Quantity(BaseModel):
    """
    A unit-less magnitude paired with a free-text unit, e.g. 1.0 "whole".
    """

    value: float
    unit: str

    model_config = {
        "from_attributes": True,
    }


class IngredientQuantity(BaseModel):
    """
    How much of a catalog ingredient a recipe uses.
    """

    ingredient: str = Field(
        ..., description="Name of the ingredient", examples=["Potato"]
    )
    quantity: Quantity

    model_config = {
        "from_attributes": True,
    }


class Recipe(BaseModel):
    """
    Model for a recipe as stored and returned by the service.
    `id` is assigned by storage and ignored on add.
    """

    id: Optional[int] = None
    name: str
    desc: Optional[str] = None
    steps: List[str] = Field(default_factory=list)
    ingredients: List[IngredientQuantity] = Field(default_factory=list)

    model_config = {
        "from_attributes": True,
    }
