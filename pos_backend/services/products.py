# pos_backend/services/products.py
import logging
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from pos_backend.models.product import Product, Stock
from pos_backend.models.sale import SaleItem
from pos_backend.schemas.product import ProductForm
from pos_backend.utils.results import Ok, Result, conflict, not_found

logger = logging.getLogger(__name__)

BARCODE_WIDTH = 12


def barcode_from_id(product_id: Any) -> str:
    """Zero-pad the id to 12 characters, keeping the last 12 when longer."""
    return str(product_id if product_id is not None else "").zfill(BARCODE_WIDTH)[-BARCODE_WIDTH:]


def parse_quantity(value: Any) -> int:
    """Form quantity: anything that is not an integer becomes 0."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def parse_price(value: Any) -> Optional[float]:
    """Decimal number with either "." or "," as separator; None when unparseable."""
    if value is None or str(value).strip() == "":
        return None
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        return None


def parse_optional_price(value: Any) -> Optional[float]:
    # Empty and zero prices are stored as NULL so the unit cost is used instead
    return parse_price(value) or None


def product_query(db: Session):
    return db.query(Product).options(joinedload(Product.stock))


def list_products(db: Session, *, q: Optional[str] = None, labels_printed: Optional[bool] = None):
    query = product_query(db)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.barcode.ilike(like), Product.description.ilike(like)))
    if labels_printed is not None:
        query = query.filter(Product.labels_printed == labels_printed)
    return query.order_by(Product.id.asc())


def get_product(db: Session, product_id: int) -> Result[Product]:
    product = product_query(db).filter(Product.id == product_id).first()
    if not product:
        return not_found("Product not found")
    return Ok(product)


def find_by_barcode(db: Session, barcode: str) -> Result[Product]:
    product = product_query(db).filter(Product.barcode == barcode).first()
    if not product:
        return not_found("Product not found")
    return Ok(product)


def insert_product(db: Session, *, name: str, unit_cost: float, sale_price: Optional[float],
                   description: Optional[str], quantity: int) -> Product:
    """Insert product + stock inside the caller's transaction.

    The barcode depends on the generated id, so the row is flushed first and
    the barcode written in a second statement.
    """
    product = Product(
        name=name, barcode=None, unit_cost=unit_cost, sale_price=sale_price,
        description=description or None, labels_printed=False,
    )
    db.add(product)
    db.flush()

    product.barcode = barcode_from_id(product.id)
    product.stock = Stock(product_id=product.id, quantity=quantity)
    db.flush()
    return product


def create_product(db: Session, form: ProductForm) -> Result[Product]:
    try:
        product = insert_product(
            db, name=form.name, unit_cost=form.unit_cost, sale_price=form.sale_price,
            description=form.description, quantity=form.quantity,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(product)
    logger.info("Product %s created with barcode %s", product.id, product.barcode)
    return Ok(product)


def update_product(db: Session, product_id: int, form: ProductForm) -> Result[Product]:
    product = product_query(db).filter(Product.id == product_id).first()
    if not product:
        return not_found("Product not found")

    product.name = form.name
    product.barcode = barcode_from_id(product.id)
    product.unit_cost = form.unit_cost
    product.sale_price = form.sale_price
    product.description = form.description or None
    if product.stock is None:
        product.stock = Stock(product_id=product.id, quantity=form.quantity)
    else:
        product.stock.quantity = form.quantity

    db.commit()
    db.refresh(product)
    return Ok(product)


def delete_product(db: Session, product_id: int) -> Result[str]:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        return not_found("Product not found")
    if db.query(SaleItem.id).filter(SaleItem.product_id == product_id).first():
        return conflict("Product has recorded sales and cannot be deleted")

    name = product.name
    db.delete(product)
    db.commit()
    return Ok(name)


def set_labels_printed(db: Session, product_id: int, value: Optional[bool]) -> Result[Product]:
    product = product_query(db).filter(Product.id == product_id).first()
    if not product:
        return not_found("Product not found")
    product.labels_printed = (not product.labels_printed) if value is None else value
    db.commit()
    db.refresh(product)
    return Ok(product)
