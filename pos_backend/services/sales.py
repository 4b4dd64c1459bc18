# pos_backend/services/sales.py
"""Sale creation and reversal.

Both operations run inside a single database transaction: either every line,
stock movement and the header total are committed together, or nothing is.
"""
import logging
import re
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from pos_backend.models.customer import Customer
from pos_backend.models.product import Product, Stock
from pos_backend.models.sale import Sale, SaleItem, SaleStatus
from pos_backend.schemas.sale import SaleCreate
from pos_backend.utils.results import Failure, Ok, Result, conflict, invalid, not_found

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"^\s*\d+\s*$")


def parse_sale_quantity(value) -> Optional[int]:
    """Positive integer or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and _INTEGER.match(value):
        parsed = int(value)
        return parsed if parsed > 0 else None
    return None


def _lock_stock(db: Session, product_id: int) -> Optional[Stock]:
    # populate_existing so the locked read replaces whatever the identity map holds
    return (
        db.query(Stock)
        .filter(Stock.product_id == product_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def get_sale(db: Session, sale_id: int) -> Result[Sale]:
    sale = (
        db.query(Sale)
        .options(joinedload(Sale.customer), joinedload(Sale.items).joinedload(SaleItem.product))
        .filter(Sale.id == sale_id)
        .first()
    )
    if not sale:
        return not_found("Sale not found")
    return Ok(sale)


def _add_lines(db: Session, sale: Sale, payload: SaleCreate) -> Result[float]:
    total = 0.0
    for item in payload.items:
        barcode = (item.barcode or "").strip()
        if not barcode or item.quantity in (None, ""):
            return invalid("Invalid barcode or quantity")

        quantity = parse_sale_quantity(item.quantity)
        if quantity is None:
            return invalid(f"Invalid quantity for item with barcode {barcode}")

        product = db.query(Product).filter(Product.barcode == barcode).first()
        if not product:
            return not_found(f"Product with barcode {barcode} not found")

        stock = _lock_stock(db, product.id)
        available = stock.quantity if stock else 0
        if available < quantity:
            return conflict(f"Insufficient stock for product {product.name} (barcode: {barcode})")

        unit_price = product.price
        total += quantity * unit_price

        db.add(SaleItem(sale_id=sale.id, product_id=product.id, quantity=quantity, unit_price=unit_price))
        stock.quantity = available - quantity
        # Flush so a repeated barcode later in the request sees the decrement
        db.flush()
    return Ok(total)


def create_sale(db: Session, payload: SaleCreate) -> Result[Sale]:
    if not payload.items:
        return invalid("No items added to the sale")
    if payload.customer_id is not None:
        if not db.query(Customer.id).filter(Customer.id == payload.customer_id).first():
            return not_found("Customer not found")

    try:
        sale = Sale(customer_id=payload.customer_id, total=0, status=SaleStatus.COMPLETED)
        db.add(sale)
        db.flush()

        total = _add_lines(db, sale, payload)
        if isinstance(total, Failure):
            db.rollback()
            logger.info("Sale rejected and rolled back: %s", total.message)
            return total

        sale.total = round(total.value, 2)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Sale %s created with %d item(s), total %.2f", sale.id, len(payload.items), sale.total)
    return get_sale(db, sale.id)


def cancel_sale(db: Session, sale_id: int) -> Result[Sale]:
    """Mark a sale cancelled and put every line's quantity back in stock."""
    try:
        sale = (
            db.query(Sale)
            .filter(Sale.id == sale_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not sale:
            db.rollback()
            return not_found("Sale not found")
        if sale.status == SaleStatus.CANCELLED:
            db.rollback()
            return conflict("Sale is already cancelled")

        for item in sale.items:
            stock = _lock_stock(db, item.product_id)
            if stock is None:
                db.add(Stock(product_id=item.product_id, quantity=item.quantity))
            else:
                stock.quantity += item.quantity
            db.flush()

        sale.status = SaleStatus.CANCELLED
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Sale %s cancelled, stock restored", sale_id)
    return get_sale(db, sale_id)
