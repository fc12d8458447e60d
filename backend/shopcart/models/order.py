from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from shopcart.db import Base


class Order(Base):
    """
    Immutable record of a checkout.

    Buy-now orders carry the product id; cart orders leave it NULL, so the
    unique constraint only prevents a second buy-now of the same product.
    """

    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_orders_user_product"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    address = Column(String(512), nullable=True)
    mobile_no = Column(String(32), nullable=True)
    total_quantity = Column(Integer, nullable=False, default=0)
    category_quantities = Column(JSON, nullable=True)
    user_details = Column(JSON, nullable=False)
    product_details = Column(JSON, nullable=False)
    created_at = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )

    user = relationship("User")
