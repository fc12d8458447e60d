import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from filelock import FileLock, Timeout
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopcart.config import settings
from shopcart.db import SessionLocal
from shopcart.models.cart_item import CartItem
from shopcart.repositories.cart_repo import CartRepository
from shopcart.repositories.product_repo import ProductRepository
from shopcart.repositories.user_repo import UserRepository
from shopcart.services.exceptions import InternalFailure, NotFound

log = logging.getLogger("shopcart.cart")


class CartService:
    def __init__(self, db: Session, retention_seconds: Optional[int] = None):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.product_repo = ProductRepository(db)
        self.user_repo = UserRepository(db)
        if retention_seconds is None:
            retention_seconds = settings.CART_RETENTION_SECONDS
        self.retention = timedelta(seconds=retention_seconds)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def add_item(self, user_id: int, product_id: int) -> List[CartItem]:
        """
        Add one unit of a product to the user's cart and return the whole cart,
        removed items included.

        A repeated add increments the existing row; adding a product that was
        removed brings its row back instead of inserting a second one.
        """
        product = self.product_repo.get(product_id)
        if not product:
            raise NotFound("Product not found.")
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFound("User not found.")

        if not self.cart_repo.increment_or_reactivate(user_id, product_id):
            try:
                self.cart_repo.insert_item(user, product)
            except IntegrityError:
                # a concurrent add inserted the row first
                self.db.rollback()
                if not self.cart_repo.increment_or_reactivate(user_id, product_id):
                    raise InternalFailure("Could not add the product to the cart.")
        self.db.commit()
        log.info("cart add user=%s product=%s", user_id, product_id)
        return self.cart_repo.list_for_user(user_id)

    def remove_item(self, user_id: int, product_id: int) -> CartItem:
        """
        Soft-delete the item; it is purged once `purge_after` has passed.
        Removing an already removed item leaves its due time untouched.
        """
        item = self.cart_repo.get(user_id, product_id)
        if not item:
            raise NotFound("Cart item not found.")
        if item.is_active:
            self.cart_repo.mark_soft_deleted(item, self._now(), self.retention)
            self.db.commit()
            self.db.refresh(item)
            log.info(
                "cart remove user=%s product=%s purge_after=%s",
                user_id,
                product_id,
                item.purge_after,
            )
        return item

    def list_items(self, user_id: int, include_deleted: bool = True) -> List[CartItem]:
        return self.cart_repo.list_for_user(user_id, include_deleted=include_deleted)

    def purge_item(self, item_id: int, now: Optional[datetime] = None) -> bool:
        """Permanently delete one item if it is still soft-deleted and due."""
        deleted = self.cart_repo.delete_if_due(item_id, now or self._now())
        self.db.commit()
        return deleted

    def purge_expired(self, now: Optional[datetime] = None) -> List[int]:
        """
        Find soft-deleted items past their due time and delete them.
        Return list of purged item ids.
        """
        now = now or self._now()
        try:
            purged = [
                item_id
                for item_id in self.cart_repo.due_for_purge(now)
                if self.cart_repo.delete_if_due(item_id, now)
            ]
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        if purged:
            log.info("purged %d soft-deleted cart items", len(purged))
        return purged


def _purge_lock_path() -> str:
    locks_dir = os.path.join(tempfile.gettempdir(), "shopcart_locks")
    os.makedirs(locks_dir, exist_ok=True)
    return os.path.join(locks_dir, "cart_purge.lock")


def run_purge_sweep(now: Optional[datetime] = None) -> List[int]:
    """
    Scheduler entry point. Only one process sweeps at a time; failures are
    logged and never propagate.
    """
    lock = FileLock(_purge_lock_path())
    try:
        with lock.acquire(timeout=0):
            db = SessionLocal()
            try:
                return CartService(db).purge_expired(now)
            finally:
                db.close()
    except Timeout:
        log.warning("purge sweep skipped; lock %s is held", lock.lock_file)
    except Exception:
        log.exception("purge sweep failed")
    return []
