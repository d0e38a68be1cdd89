from pydantic import BaseModel, Field
from typing import List, Optional

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, gt=0)
    discount: float = Field(default=0.0, ge=0)

# Request schema for updating a cart line
class CartUpdateItem(BaseModel):
    quantity: Optional[int] = Field(default=None, gt=0)
    discount: Optional[float] = Field(default=None, ge=0)

# Response schema for a single cart line item
class CartItemOut(BaseModel):
    id: int
    product_id: int
    name: str
    sku: str
    quantity: int
    unit_price: float
    discount: float
    line_total: float

# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartItemOut]
    item_count: int
    subtotal: float
