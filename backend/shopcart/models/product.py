from sqlalchemy import Column, Integer, String, Boolean, Text
from shopcart.db import Base

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(256), nullable=False, index=True)
    category = Column(String(128), nullable=True, index=True)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False, default=0)
    image = Column(String(512), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    stock = Column(Integer, default=0, nullable=False)

    def snapshot(self) -> dict:
        """Display fields copied onto cart items and orders."""
        return {
            "name": self.name,
            "price_cents": self.price_cents,
            "image": self.image,
            "description": self.description,
            "category": self.category,
            "stock": self.stock,
        }

    def __repr__(self):
        return f"<Product id={self.id} name={self.name}>"
