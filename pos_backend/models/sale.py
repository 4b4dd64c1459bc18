import enum
from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Enum, Computed, func
from sqlalchemy.orm import relationship
from pos_backend.database import Base


# Enumeration of possible sale states
class SaleStatus(str, enum.Enum):
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Sale header: customer reference, total and status
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    total = Column(Float, nullable=False, default=0)
    status = Column(Enum(SaleStatus), nullable=False, default=SaleStatus.COMPLETED)
    created_at = Column(DateTime, server_default=func.now(), index=True)

    customer = relationship("Customer")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan", order_by="SaleItem.id")


# One product entry within a sale; unit_price is copied at time of sale
class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    subtotal = Column(Float, Computed("quantity * unit_price", persisted=True))

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")
