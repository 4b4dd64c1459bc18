from pydantic import BaseModel, ConfigDict
from typing import List, Optional, Union
from datetime import datetime

from pos_backend.models.sale import SaleStatus


# One requested line. Values stay loose so the workflow can report
# "invalid quantity" itself instead of a schema error.
class SaleItemRequest(BaseModel):
    barcode: Optional[str] = None
    quantity: Union[int, str, None] = None


class SaleCreate(BaseModel):
    customer_id: Optional[int] = None
    items: List[SaleItemRequest] = []


class SaleItemOut(BaseModel):
    product_id: int
    product_name: str
    barcode: Optional[str] = None
    quantity: int
    unit_price: float
    subtotal: float


class SaleResponse(BaseModel):
    id: int
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    status: SaleStatus
    total: float
    created_at: Optional[datetime] = None
    items: List[SaleItemOut]

    model_config = ConfigDict(from_attributes=True)


class SaleSummary(BaseModel):
    id: int
    customer_name: Optional[str] = None
    status: SaleStatus
    total: float
    created_at: Optional[datetime] = None


class SalesPage(BaseModel):
    items: List[SaleSummary]
    total: int
    page: int
    page_size: int
