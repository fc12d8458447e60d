from typing import List, Optional, Tuple

from shopcart.models.product import Product
from sqlalchemy import func
from sqlalchemy.orm import Session

PRICE_HIGH_TO_LOW = "h2l"
PRICE_LOW_TO_HIGH = "l2h"


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.active == True)
            .first()
        )

    def list(
        self,
        name: Optional[str] = None,
        category: Optional[str] = None,
        price_sort: Optional[str] = None,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[Product], int]:
        """
        Filter by case-insensitive substring of name and/or category.
        price_sort is "h2l", "l2h" or None (catalogue order).
        """
        query = self.db.query(Product).filter(Product.active == True)
        if name:
            query = query.filter(Product.name.ilike(f"%{name}%"))
        if category:
            query = query.filter(Product.category.ilike(f"%{category}%"))
        total = query.with_entities(func.count()).scalar() or 0

        if price_sort == PRICE_HIGH_TO_LOW:
            query = query.order_by(Product.price_cents.desc(), Product.id)
        elif price_sort == PRICE_LOW_TO_HIGH:
            query = query.order_by(Product.price_cents.asc(), Product.id)
        else:
            query = query.order_by(Product.id)
        items = query.offset((page - 1) * size).limit(size).all()
        return items, total

    def create_or_update(
        self,
        name: str,
        price_cents: int,
        category: str = None,
        stock: int = 0,
        description: str = None,
        image: str = None,
    ) -> Product:
        # products are keyed by (name, category) when seeding
        p = (
            self.db.query(Product)
            .filter(Product.name == name, Product.category == category)
            .first()
        )
        if p:
            p.price_cents = price_cents
            p.stock = stock
            p.description = description
            p.image = image
        else:
            p = Product(
                name=name,
                category=category,
                price_cents=price_cents,
                stock=stock,
                description=description,
                image=image,
            )
            self.db.add(p)
        self.db.flush()
        return p
