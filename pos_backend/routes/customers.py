# pos_backend/routes/customers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, Query, status
from sqlalchemy.orm import Session

from pos_backend.database import get_db
from pos_backend.models.customer import Customer
from pos_backend.models.users import User
from pos_backend.schemas.customer import CustomerForm, CustomerListPage, CustomerOut, CustomerSuggestion
from pos_backend.services import customers as customer_service
from pos_backend.utils.forms import decode_form_data, redirect_to, redirect_with_error
from pos_backend.utils.results import Failure, unwrap
from pos_backend.utils.tokenJWT import admin_required, get_current_user

router = APIRouter(prefix="/customers", tags=["Customers"])

LIST_PATH = "/customers"
TYPEAHEAD_LIMIT = 10


def _suggestion(customer: Customer) -> CustomerSuggestion:
    return CustomerSuggestion(
        id=customer.id, name=customer.name, tax_id=customer_service.format_tax_id(customer.tax_id),
    )


def _customer_form(
    name: Optional[str] = Form(None),
    tax_id: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
) -> CustomerForm:
    return CustomerForm(name=name, tax_id=tax_id, email=email, phone=phone, address=address)


@router.get("", response_model=CustomerListPage)
def list_customers(
    search: str = Query(""),
    error: str = Query(""),
    formData: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = customer_service.search_customers(db, search)
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {
        "items": items, "total": total, "page": page, "page_size": page_size,
        "search": search, "error": error, "form_data": decode_form_data(formData),
    }


# Typeahead for the sale screen
@router.get("/search", response_model=List[CustomerSuggestion])
def search_customers(
    search: str = Query(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = customer_service.search_customers(db, search).limit(TYPEAHEAD_LIMIT).all()
    return [_suggestion(c) for c in rows]


# Form submission: redirects back to the list, with the error and input on failure
@router.post("")
def create_customer(
    form: CustomerForm = Depends(_customer_form),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = customer_service.create_customer(db, form)
    if isinstance(result, Failure):
        return redirect_with_error(LIST_PATH, result.message, form.model_dump())
    return redirect_to(LIST_PATH)


# JSON creation from the sale screen modal
@router.post("/quick", response_model=CustomerSuggestion, status_code=status.HTTP_201_CREATED)
def quick_create_customer(
    payload: CustomerForm,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _suggestion(unwrap(customer_service.create_customer(db, payload)))


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(customer_service.get_customer(db, customer_id))


@router.post("/{customer_id}/edit")
def edit_customer(
    customer_id: int,
    form: CustomerForm = Depends(_customer_form),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = customer_service.update_customer(db, customer_id, form)
    if isinstance(result, Failure):
        return redirect_with_error(LIST_PATH, result.message, form.model_dump())
    return redirect_to(LIST_PATH)


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    name = unwrap(customer_service.delete_customer(db, customer_id))
    return {"detail": f"Customer '{name}' deleted"}
