# pos_backend/schemas/product.py
from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Form input for create and edit. Any barcode sent by the client is ignored.
class ProductForm(BaseModel):
    name: str
    unit_cost: float
    sale_price: Optional[float] = None
    description: Optional[str] = None
    quantity: int = 0


# Product joined with its stock row
class ProductOut(ORMBase):
    id: int
    name: str
    barcode: Optional[str] = None
    unit_cost: float
    sale_price: Optional[float] = None
    price: float
    description: Optional[str] = None
    labels_printed: bool
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int


# Point-of-sale barcode scan result
class ProductLookup(BaseModel):
    id: int
    name: str
    barcode: str
    price: float
    stock: int


class LabelFlagUpdate(BaseModel):
    labels_printed: Optional[bool] = None  # omitted: toggle


class ImportSummary(BaseModel):
    imported: int
    skipped: int
