# pos_backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, Text, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from pos_backend.database import Base


# Catalogue entry. The barcode is derived from the id after insertion,
# so it is nullable until the second write of the create transaction.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    barcode = Column(String(50), unique=True, nullable=True, index=True)

    unit_cost = Column(Float, nullable=False)
    sale_price = Column(Float, nullable=True)  # falls back to unit_cost when empty
    description = Column(Text, nullable=True)
    labels_printed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    stock = relationship("Stock", back_populates="product", uselist=False, cascade="all, delete-orphan")

    @property
    def price(self) -> float:
        return float(self.sale_price or self.unit_cost or 0)

    @property
    def quantity(self) -> int:
        return self.stock.quantity if self.stock else 0


# Quantity on hand, exactly one row per product
class Stock(Base):
    __tablename__ = "stock"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), unique=True, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    product = relationship("Product", back_populates="stock")
