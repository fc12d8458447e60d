from fastapi import APIRouter, Depends, Query
from typing import Literal, Optional
from sqlalchemy.orm import Session
from shopcart.api.responses import failure, success
from shopcart.db import get_db
from shopcart.repositories.product_repo import ProductRepository
from shopcart.schemas.product_schema import ProductOut
from shopcart.services.exceptions import NotFound

router = APIRouter(tags=["catalogue"])

@router.get("", summary="List products")
def list_products(
    name: Optional[str] = Query(None, description="product name contains"),
    category: Optional[str] = Query(None, description="category contains"),
    price_sort: Optional[Literal["h2l", "l2h"]] = Query(None, description="h2l or l2h"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    repo = ProductRepository(db)
    try:
        items, total = repo.list(
            name=name, category=category, price_sort=price_sort, page=page, size=limit
        )
    except Exception as e:
        raise failure(e, "An error occurred while fetching products.")
    return success(
        "Products found successfully.",
        {
            "items": [ProductOut.model_validate(p).model_dump() for p in items],
            "total": total,
            "page": page,
            "limit": limit,
        },
    )

@router.get("/{product_id}", summary="Get product by id")
def get_product(product_id: int, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    try:
        p = repo.get(product_id)
        if not p:
            raise NotFound("Product not found.")
    except Exception as e:
        raise failure(e, "An error occurred while fetching the product.")
    return success("Product found successfully.", {"product": ProductOut.model_validate(p).model_dump()})
