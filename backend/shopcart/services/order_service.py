import logging
from typing import Dict, Iterable, List, Tuple
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopcart.models.cart_item import CartItem
from shopcart.models.order import Order
from shopcart.models.user import User
from shopcart.repositories.cart_repo import CartRepository
from shopcart.repositories.product_repo import ProductRepository
from shopcart.repositories.user_repo import UserRepository
from shopcart.services.exceptions import Conflict, EmptyCart, InternalFailure, NotFound

log = logging.getLogger("shopcart.orders")


def summarize_quantities(lines: Iterable[Dict]) -> Tuple[int, Dict[str, int], List]:
    """
    Sum ordered quantities overall and per category.

    Lines without a category count towards the total but are left out of the
    category map; their product ids are returned so the caller can report them.
    """
    total = 0
    by_category: Dict[str, int] = {}
    uncategorized = []
    for line in lines:
        qty = line["quantity"]
        total += qty
        category = line.get("category")
        if not category:
            uncategorized.append(line.get("product_id"))
            continue
        by_category[category] = by_category.get(category, 0) + qty
    return total, by_category, uncategorized


class OrderService:
    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.product_repo = ProductRepository(db)
        self.user_repo = UserRepository(db)

    def _gen_order_number(self) -> str:
        return f"ORD-{uuid4().hex[:10].upper()}"

    def _user_details(self, user: User) -> Dict:
        return {"username": user.username, "email": user.email}

    def _line_from_cart_item(self, item: CartItem) -> Dict:
        # prefer the live product; fall back to the snapshot taken at add time
        detail = item.product.snapshot() if item.product else dict(item.product_detail or {})
        return {"product_id": item.product_id, "quantity": item.quantity, **detail}

    def get_order(self, order_id: int) -> Order:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFound("Order not found.")
        return order

    def list_orders(self, user_id: int) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def buy_now(self, user_id: int, product_id: int, address: str, mobile_no: str) -> Order:
        product = self.product_repo.get(product_id)
        if not product:
            raise NotFound("Product not found.")
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFound("User not found.")

        existing = (
            self.db.query(Order)
            .filter(Order.user_id == user_id, Order.product_id == product_id)
            .first()
        )
        if existing:
            raise Conflict("Order for this product already exists.")

        order = Order(
            order_number=self._gen_order_number(),
            user_id=user_id,
            product_id=product_id,
            address=address,
            mobile_no=mobile_no,
            total_quantity=1,
            user_details=self._user_details(user),
            product_details=[{"product_id": product.id, "quantity": 1, **product.snapshot()}],
        )
        self.db.add(order)
        try:
            self.db.commit()
        except IntegrityError:
            # lost the race against a concurrent buy-now of the same product
            self.db.rollback()
            raise Conflict("Order for this product already exists.")
        self.db.refresh(order)
        log.info("buy-now order %s user=%s product=%s", order.order_number, user_id, product_id)
        return order

    def place_cart_order(self, user_id: int, mobile_no: str, address: str) -> Order:
        """
        Turn the user's active cart into one order and clear the ordered rows
        along with removed ones. The order insert and the cart clear are
        committed together.
        """
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFound("User not found.")

        items = self.cart_repo.list_for_user(user_id, include_deleted=False)
        if not items:
            raise EmptyCart("Cart is empty.")

        lines = [self._line_from_cart_item(it) for it in items]
        ordered_ids = [it.id for it in items]
        total_quantity, category_quantities, uncategorized = summarize_quantities(lines)
        for pid in uncategorized:
            log.warning("No category found for product id %s; left out of category totals", pid)

        order = Order(
            order_number=self._gen_order_number(),
            user_id=user_id,
            address=address,
            mobile_no=mobile_no,
            total_quantity=total_quantity,
            category_quantities=category_quantities,
            user_details=self._user_details(user),
            product_details=lines,
        )
        try:
            self.db.add(order)
            self.db.flush()
            cleared = self.cart_repo.delete_checked_out(user_id, ordered_ids)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            log.exception("cart checkout failed for user=%s", user_id)
            raise InternalFailure("An error occurred while placing the order.") from e
        self.db.refresh(order)
        log.info(
            "cart order %s user=%s quantity=%s cleared=%s",
            order.order_number,
            user_id,
            total_quantity,
            cleared,
        )
        return order
