from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict, Any


class CustomerForm(BaseModel):
    name: Optional[str] = None
    tax_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class CustomerOut(BaseModel):
    id: int
    name: str
    tax_id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# Listing payload; error and form_data carry a failed submission back to the page
class CustomerListPage(BaseModel):
    items: List[CustomerOut]
    total: int
    page: int
    page_size: int
    search: str = ""
    error: str = ""
    form_data: Dict[str, Any] = {}


# Typeahead row, tax id formatted for display
class CustomerSuggestion(BaseModel):
    id: int
    name: str
    tax_id: str
