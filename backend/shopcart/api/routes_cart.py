from shopcart.api.responses import failure, success
from shopcart.db import get_db
from shopcart.schemas.cart_schema import CartItemOut
from shopcart.services.cart_service import CartService
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

router = APIRouter(prefix="/api/cart", tags=["cart"])


class AddItemIn(BaseModel):
    product_id: int


def _dump(items):
    return [CartItemOut.model_validate(it).model_dump(mode="json") for it in items]


@router.get("/{user_id}", summary="List cart items")
def list_items(
    user_id: int,
    include_deleted: bool = Query(True, description="include soft-deleted items"),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        items = svc.list_items(user_id, include_deleted=include_deleted)
    except Exception as e:
        raise failure(e, "An error occurred while fetching cart items.")
    return success("Cart items found successfully.", {"items": _dump(items)})


@router.post("/{user_id}/items", summary="Add item to cart")
def add_item(user_id: int, payload: AddItemIn, db: Session = Depends(get_db)):
    svc = CartService(db)
    try:
        items = svc.add_item(user_id, payload.product_id)
    except Exception as e:
        raise failure(e, "An error occurred while adding the product to cart.")
    return success("Product added to cart successfully.", {"cart": _dump(items)})


@router.delete("/{user_id}/items/{product_id}", summary="Remove item")
def remove_item(user_id: int, product_id: int, db: Session = Depends(get_db)):
    svc = CartService(db)
    try:
        item = svc.remove_item(user_id, product_id)
    except Exception as e:
        raise failure(e, "An error occurred while removing the cart item.")
    return success(
        "Cart item marked for deletion. It will be permanently removed after the retention window.",
        {"cart_item": CartItemOut.model_validate(item).model_dump(mode="json")},
    )
