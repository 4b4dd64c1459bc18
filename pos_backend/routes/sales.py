# pos_backend/routes/sales.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session, joinedload

from pos_backend.config import Settings
from pos_backend.database import get_db, get_settings
from pos_backend.models.sale import Sale, SaleStatus
from pos_backend.models.users import User
from pos_backend.schemas.sale import SaleCreate, SaleItemOut, SaleResponse, SalesPage, SaleSummary
from pos_backend.services import sales as sale_service
from pos_backend.utils.receipt import receipt_filename, render_receipt
from pos_backend.utils.results import unwrap
from pos_backend.utils.tokenJWT import admin_required, get_current_user

router = APIRouter(prefix="/sales", tags=["Sales"])
logger = logging.getLogger(__name__)


# Map Sale model to SaleResponse schema
def _sale_to_out(sale: Sale) -> SaleResponse:
    items: List[SaleItemOut] = []
    for it in sale.items:
        items.append(SaleItemOut(
            product_id=it.product_id,
            product_name=it.product.name if it.product else "Deleted product",
            barcode=it.product.barcode if it.product else None,
            quantity=it.quantity,
            unit_price=it.unit_price,
            subtotal=round(it.quantity * it.unit_price, 2),
        ))
    return SaleResponse(
        id=sale.id,
        customer_id=sale.customer_id,
        customer_name=sale.customer.name if sale.customer else None,
        status=sale.status,
        total=round(sale.total, 2),
        created_at=sale.created_at,
        items=items,
    )


@router.get("", response_model=SalesPage)
def list_sales(
    status_filter: Optional[SaleStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = db.query(Sale).options(joinedload(Sale.customer))
    if status_filter:
        q = q.filter(Sale.status == status_filter)
    q = q.order_by(Sale.id.desc())

    total = q.count()
    rows = q.offset((page - 1) * page_size).limit(page_size).all()
    items = [
        SaleSummary(
            id=s.id, customer_name=s.customer.name if s.customer else None,
            status=s.status, total=round(s.total, 2), created_at=s.created_at,
        )
        for s in rows
    ]
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Register a sale: all lines and stock movements commit together or not at all
@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def create_sale(
    payload: SaleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = unwrap(sale_service.create_sale(db, payload))
    return _sale_to_out(sale)


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _sale_to_out(unwrap(sale_service.get_sale(db, sale_id)))


# Reverse a sale and restock its items (Admin only)
@router.post("/{sale_id}/cancel", response_model=SaleResponse)
def cancel_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    sale = unwrap(sale_service.cancel_sale(db, sale_id))
    logger.info("Sale %s cancelled by user %s", sale.id, current_user.id)
    return _sale_to_out(sale)


@router.get("/{sale_id}/receipt")
def download_receipt(
    sale_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    sale = unwrap(sale_service.get_sale(db, sale_id))
    pdf = render_receipt(sale, store_name=settings.STORE_NAME)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={receipt_filename(sale.id)}"},
    )
