from typing import Optional
from pydantic import BaseModel
from pydantic import ConfigDict

class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    price_cents: int
    image: Optional[str] = None
    stock: int
    active: bool
