from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field

# A box id as reported by whoever decided: the packer API answers with strings,
# the catalog (and so the fallback) with integers.
BoxId = Union[str, int]

# "No single box fits" is a valid answer, not an error.
NO_BOX_FITS = False

Decision = Union[BoxId, bool]


class Item(BaseModel):
    """One product unit from the cart."""

    width: float = Field(ge=0, description="Width of the item")
    height: float = Field(ge=0, description="Height of the item")
    length: float = Field(ge=0, description="Length of the item")
    weight: float = Field(ge=0, description="Weight of the item")


class Box(BaseModel):
    """Box available in the warehouse. Interior dimensions and weight capacity."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Catalog id, never reassigned")
    width: float = Field(ge=0, description="Interior width")
    height: float = Field(ge=0, description="Interior height")
    length: float = Field(ge=0, description="Interior length")
    max_weight: float = Field(ge=0, description="Maximum weight capacity")


class PackRequest(BaseModel):
    """Decoded body of a pack request."""

    products: list[Item] = Field(description="Products in the cart")


class PackResponse(BaseModel):
    """Outward decision. `box_id` is false when no single box fits."""

    box_id: Decision
