from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_number: str
    user_id: int
    product_id: Optional[int] = None
    address: Optional[str] = None
    mobile_no: Optional[str] = None
    total_quantity: int
    category_quantities: Optional[Dict[str, int]] = None
    user_details: Dict[str, Any]
    product_details: List[Dict[str, Any]]
    created_at: datetime
