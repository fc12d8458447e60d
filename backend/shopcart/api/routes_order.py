from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from shopcart.api.responses import failure, success
from shopcart.db import get_db
from shopcart.schemas.order_schema import OrderOut
from shopcart.services.order_service import OrderService

router = APIRouter(tags=["orders"])

class BuyNowIn(BaseModel):
    user_id: int
    product_id: int
    address: str = Field(..., min_length=1)
    mobile_no: str = Field(..., min_length=1)

class CartOrderIn(BaseModel):
    user_id: int
    address: str = Field(..., min_length=1)
    mobile_no: str = Field(..., min_length=1)

def _dump(order):
    return OrderOut.model_validate(order).model_dump(mode="json")

@router.post("/buy-now", summary="Order a single product")
def buy_now(payload: BuyNowIn, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        order = svc.buy_now(payload.user_id, payload.product_id, payload.address, payload.mobile_no)
    except Exception as e:
        raise failure(e, "An error occurred while placing the order.")
    return success("Order placed successfully", {"order": _dump(order)})

@router.post("/checkout", summary="Order the whole cart")
def place_cart_order(payload: CartOrderIn, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        order = svc.place_cart_order(payload.user_id, payload.mobile_no, payload.address)
    except Exception as e:
        raise failure(e, "An error occurred while placing the order.")
    return success("Order placed successfully", {"order": _dump(order)})

@router.get("/{order_id}", summary="Get order")
def get_order(order_id: int, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        order = svc.get_order(order_id)
    except Exception as e:
        raise failure(e, "An error occurred while fetching the order.")
    return success("Order found successfully.", {"order": _dump(order)})

@router.get("", summary="List a user's orders")
def list_orders(user_id: int, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        orders = svc.list_orders(user_id)
    except Exception as e:
        raise failure(e, "An error occurred while fetching orders.")
    return success("Orders found successfully.", {"orders": [_dump(o) for o in orders]})
