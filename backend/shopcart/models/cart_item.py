from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from shopcart.db import Base

STATUS_ACTIVE = 1
STATUS_SOFT_DELETED = -9


class CartItem(Base):
    __tablename__ = "cart_items"
    # one row per (user, product) whatever its status
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    quantity = Column(Integer, nullable=False, default=1)
    status = Column(Integer, nullable=False, default=STATUS_ACTIVE, index=True)
    inserted_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    soft_deleted_at = Column(DateTime, nullable=True)
    purge_after = Column(DateTime, nullable=True, index=True)

    # display fields captured when the item was first added
    user_detail = Column(JSON, nullable=True)
    product_detail = Column(JSON, nullable=True)

    user = relationship("User")
    product = relationship("Product")

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
