from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from shopcart.schemas.product_schema import ProductOut
from shopcart.schemas.user_schema import UserBrief


class CartItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    product_id: int
    quantity: int
    status: int
    inserted_at: Optional[datetime] = None
    soft_deleted_at: Optional[datetime] = None
    purge_after: Optional[datetime] = None
    user_detail: Optional[Dict[str, Any]] = None
    product_detail: Optional[Dict[str, Any]] = None
    # resolved references
    product: Optional[ProductOut] = None
    user: Optional[UserBrief] = None
