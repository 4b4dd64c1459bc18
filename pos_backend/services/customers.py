import re
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from pos_backend.models.customer import Customer
from pos_backend.models.sale import Sale
from pos_backend.schemas.customer import CustomerForm
from pos_backend.utils.results import Failure, Ok, Result, conflict, invalid, not_found

TAX_ID_PUNCTUATION = re.compile(r"[\s./-]")
TAX_ID_PATTERN = re.compile(r"^[0-9]{11}$")


def strip_tax_id(value: Optional[str]) -> str:
    return TAX_ID_PUNCTUATION.sub("", value or "")


def normalize_tax_id(value: Optional[str]) -> Result[str]:
    cleaned = strip_tax_id(value)
    if not TAX_ID_PATTERN.match(cleaned):
        return invalid("Invalid tax id. It must contain 11 numeric digits.")
    return Ok(cleaned)


def format_tax_id(value: Optional[str]) -> str:
    if not value:
        return ""
    if TAX_ID_PATTERN.match(value):
        return f"{value[:3]}.{value[3:6]}.{value[6:9]}-{value[9:]}"
    return value


def _validate(db: Session, form: CustomerForm, exclude_id: Optional[int] = None) -> Result[dict]:
    name = (form.name or "").strip()
    if not name:
        return invalid("Name is required")

    tax_id = normalize_tax_id(form.tax_id)
    if isinstance(tax_id, Failure):
        return tax_id

    query = db.query(Customer.id).filter(Customer.tax_id == tax_id.value)
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    if query.first():
        if exclude_id is None:
            return conflict("Tax id already registered")
        return conflict("Tax id already registered for another customer")

    return Ok({
        "name": name,
        "tax_id": tax_id.value,
        "email": form.email or None,
        "phone": form.phone or None,
        "address": form.address or None,
    })


def get_customer(db: Session, customer_id: int) -> Result[Customer]:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        return not_found("Customer not found")
    return Ok(customer)


def search_customers(db: Session, search: Optional[str]):
    query = db.query(Customer)
    if search:
        clauses = [Customer.name.ilike(f"%{search}%"), Customer.email.ilike(f"%{search}%")]
        cleaned = strip_tax_id(search)
        if cleaned:
            clauses.append(Customer.tax_id.like(f"%{cleaned}%"))
        query = query.filter(or_(*clauses))
    return query.order_by(Customer.name.asc(), Customer.id.asc())


def create_customer(db: Session, form: CustomerForm) -> Result[Customer]:
    fields = _validate(db, form)
    if isinstance(fields, Failure):
        return fields

    customer = Customer(**fields.value)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return Ok(customer)


def update_customer(db: Session, customer_id: int, form: CustomerForm) -> Result[Customer]:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        return not_found("Customer not found")

    fields = _validate(db, form, exclude_id=customer_id)
    if isinstance(fields, Failure):
        return fields

    for key, value in fields.value.items():
        setattr(customer, key, value)
    db.commit()
    db.refresh(customer)
    return Ok(customer)


def delete_customer(db: Session, customer_id: int) -> Result[str]:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        return not_found("Customer not found")

    # Sales outlive the customer; only the reference is dropped
    db.query(Sale).filter(Sale.customer_id == customer_id).update(
        {Sale.customer_id: None}, synchronize_session=False
    )
    name = customer.name
    db.delete(customer)
    db.commit()
    return Ok(name)
