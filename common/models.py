"""
Pydantic models for the request/reply messages exchanged with the catalog
router. Collaborators (CLI tools, reports) talk to the catalog through these.
"""

from typing import Optional, Literal
from pydantic import BaseModel, Field
import uuid

from circulation.money import Money

OperationName = Literal[
    "BORROW", "RETURN", "RESERVE", "CANCEL",
    "ASSESS", "ASSESS_ALL", "PAY", "WAIVE", "RATE",
]


class CatalogRequest(BaseModel):
    """Collaborator → catalog request"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    op: OperationName
    title: Optional[str] = None
    person: Optional[str] = None
    days: Optional[int] = None
    amount: Optional[Money] = None
    reason: Optional[str] = None
    rating: Optional[float] = None


class FineSnapshot(BaseModel):
    """Read-only view of a copy's current fine"""
    key: str
    borrowerName: str
    daysOverdue: int
    amountDue: Money
    amountPaid: Money
    amountRemaining: Money
    settled: bool
    waived: bool
    waiveReason: Optional[str] = None


class CatalogReply(BaseModel):
    """Catalog → collaborator reply"""
    id: str
    op: str
    status: Literal["OK", "REJECTED", "ERROR"]
    reason: Optional[str] = None
    error: Optional[str] = None
    holder: Optional[str] = None
    dueDate: Optional[str] = None
    fine: Optional[FineSnapshot] = None
    count: Optional[int] = None
