# pos_backend/routes/products.py
import io
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, Form, Response, status
from sqlalchemy.orm import Session

from pos_backend.database import get_db
from pos_backend.models.product import Product
from pos_backend.models.users import User
from pos_backend.schemas import product as product_schemas
from pos_backend.services import imports as import_service
from pos_backend.services import products as product_service
from pos_backend.utils.labels import label_filename, render_labels
from pos_backend.utils.results import unwrap
from pos_backend.utils.tokenJWT import admin_required, get_current_user

router = APIRouter(tags=["Products"])

SPREADSHEET_SUFFIXES = (".xlsx", ".xls")


def _to_out(product: Product) -> product_schemas.ProductOut:
    return product_schemas.ProductOut.model_validate(product)


def _product_form(name, unit_cost, sale_price, description, quantity) -> product_schemas.ProductForm:
    cost = product_service.parse_price(unit_cost)
    if cost is None:
        raise HTTPException(status_code=400, detail="Invalid unit cost")
    return product_schemas.ProductForm(
        name=name,
        unit_cost=cost,
        sale_price=product_service.parse_optional_price(sale_price),
        description=description,
        quantity=product_service.parse_quantity(quantity),
    )


# =========================
# LISTING
# =========================
@router.get("/products", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None),
    labels_printed: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = product_service.list_products(db, q=q, labels_printed=labels_printed)
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [_to_out(p) for p in items], "total": total, "page": page, "page_size": page_size}


# =========================
# BARCODE LOOKUP (point of sale)
# =========================
@router.get("/products/lookup", response_model=product_schemas.ProductLookup)
def lookup_product(
    barcode: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not barcode:
        raise HTTPException(status_code=400, detail="Barcode is required")
    product = unwrap(product_service.find_by_barcode(db, barcode.strip()))
    return product_schemas.ProductLookup(
        id=product.id, name=product.name, barcode=product.barcode,
        price=round(product.price, 2), stock=product.quantity,
    )


# =========================
# BULK IMPORT
# =========================
@router.post("/products/import", response_model=product_schemas.ImportSummary)
def import_products(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    if not (file.filename or "").lower().endswith(SPREADSHEET_SUFFIXES):
        raise HTTPException(status_code=400, detail="Upload an .xlsx or .xls file")
    try:
        content = io.BytesIO(file.file.read())
    finally:
        file.file.close()
    return unwrap(import_service.import_products(db, content))


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/products/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _to_out(unwrap(product_service.get_product(db, product_id)))


@router.post("/products", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    name: str = Form(...),
    unit_cost: str = Form(...),
    sale_price: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    quantity: Optional[str] = Form(None),
    barcode: Optional[str] = Form(None),  # accepted for old clients, always replaced by the id
):
    form = _product_form(name, unit_cost, sale_price, description, quantity)
    return _to_out(unwrap(product_service.create_product(db, form)))


@router.patch("/products/{product_id}/edit", response_model=product_schemas.ProductOut)
def edit_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    name: str = Form(...),
    unit_cost: str = Form(...),
    sale_price: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    quantity: Optional[str] = Form(None),
    barcode: Optional[str] = Form(None),
):
    form = _product_form(name, unit_cost, sale_price, description, quantity)
    return _to_out(unwrap(product_service.update_product(db, product_id, form)))


@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    name = unwrap(product_service.delete_product(db, product_id))
    return {"detail": f"Product '{name}' deleted"}


# =========================
# LABELS
# =========================
@router.patch("/products/{product_id}/labels-printed", response_model=product_schemas.ProductOut)
def set_labels_printed(
    product_id: int,
    payload: product_schemas.LabelFlagUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _to_out(unwrap(product_service.set_labels_printed(db, product_id, payload.labels_printed)))


@router.get("/products/{product_id}/labels")
def download_labels(
    product_id: int,
    quantity: Optional[int] = Query(None, ge=0, description="Labels to print; defaults to the stock quantity"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = unwrap(product_service.get_product(db, product_id))
    count = product.quantity if quantity is None else quantity
    content = render_labels(product.id, product.name, product.price, count)
    return Response(
        content=content,
        media_type="text/plain",
        headers={"Content-Disposition": f"attachment; filename={label_filename(product.id)}"},
    )
