from pydantic import BaseModel
from typing import Optional, Union


class Product(BaseModel):
    """A sellable / purchasable product from the reference catalogue."""
    id: Union[int, str]
    name: str
    unit_cost: float = 0.0             # Default unit cost copied onto new rows


class Party(BaseModel):
    """
    The counterparty of an order.
    A supplier for purchase orders, a customer for sales orders.
    """
    id: Union[int, str]
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
