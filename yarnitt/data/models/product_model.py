"""SQLAlchemy ORM model for catalog products."""

from sqlalchemy import CheckConstraint, Column, Integer, Numeric, String

from .base import Base


class ProductModel(Base):
    """SQLAlchemy ORM model for products table."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("sold >= 0", name="ck_products_sold_non_negative"),
    )

    id = Column(String(36), primary_key=True)
    seller_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    price_amount = Column(Numeric(12, 2), nullable=False)
    price_currency = Column(String(3), nullable=False, default="KES")
    stock = Column(Integer, nullable=False, default=0)
    sold = Column(Integer, nullable=False, default=0)
