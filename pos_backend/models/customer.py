from sqlalchemy import Column, Integer, String, Text, DateTime, func
from pos_backend.database import Base


# Customer contact and identification details
class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    tax_id = Column(String(11), unique=True, nullable=False, index=True)  # 11 digits, punctuation stripped
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
