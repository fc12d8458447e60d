from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import case, delete, or_, update
from sqlalchemy.orm import Session, selectinload

from shopcart.models.cart_item import STATUS_ACTIVE, STATUS_SOFT_DELETED, CartItem
from shopcart.models.product import Product
from shopcart.models.user import User


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int, product_id: int) -> Optional[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.product_id == product_id)
            .first()
        )

    def list_for_user(self, user_id: int, include_deleted: bool = True) -> List[CartItem]:
        query = (
            self.db.query(CartItem)
            .options(selectinload(CartItem.product), selectinload(CartItem.user))
            .filter(CartItem.user_id == user_id)
        )
        if not include_deleted:
            query = query.filter(CartItem.status == STATUS_ACTIVE)
        return query.order_by(CartItem.id).all()

    def increment_or_reactivate(self, user_id: int, product_id: int) -> int:
        """
        Single UPDATE on the (user, product) row: bump the quantity of an
        active item, or bring a soft-deleted one back with quantity 1.
        Returns the number of rows touched (0 when the item does not exist).
        """
        stmt = (
            update(CartItem)
            .where(CartItem.user_id == user_id, CartItem.product_id == product_id)
            .values(
                quantity=case(
                    (CartItem.status == STATUS_SOFT_DELETED, 1),
                    else_=CartItem.quantity + 1,
                ),
                status=STATUS_ACTIVE,
                soft_deleted_at=None,
                purge_after=None,
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def insert_item(self, user: User, product: Product) -> CartItem:
        item = CartItem(
            user_id=user.id,
            product_id=product.id,
            quantity=1,
            status=STATUS_ACTIVE,
            user_detail={"username": user.username, "email": user.email},
            product_detail=product.snapshot(),
        )
        self.db.add(item)
        self.db.flush()
        return item

    def mark_soft_deleted(self, item: CartItem, now: datetime, retention: timedelta) -> CartItem:
        item.status = STATUS_SOFT_DELETED
        item.soft_deleted_at = now
        item.purge_after = now + retention
        self.db.flush()
        return item

    def due_for_purge(self, now: datetime, limit: int = 500) -> List[int]:
        rows = (
            self.db.query(CartItem.id)
            .filter(
                CartItem.status == STATUS_SOFT_DELETED,
                CartItem.purge_after <= now,
            )
            .order_by(CartItem.purge_after)
            .limit(limit)
            .all()
        )
        return [r.id for r in rows]

    def delete_if_due(self, item_id: int, now: datetime) -> bool:
        # the row may have been re-added or purged since it was selected
        stmt = (
            delete(CartItem)
            .where(
                CartItem.id == item_id,
                CartItem.status == STATUS_SOFT_DELETED,
                CartItem.purge_after <= now,
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount > 0

    def delete_checked_out(self, user_id: int, item_ids: List[int]) -> int:
        """
        Clear the cart after checkout: the rows that were ordered plus any
        soft-deleted rows. Items added after the order was built are kept.
        """
        stmt = (
            delete(CartItem)
            .where(
                CartItem.user_id == user_id,
                or_(CartItem.id.in_(item_ids), CartItem.status == STATUS_SOFT_DELETED),
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount
