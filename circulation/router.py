"""
Catalog routing logic for collaborator requests.
Validates a request message, dispatches it to the matching Catalog
operation and maps the outcome onto a reply:

- OK        the operation was applied
- REJECTED  the operation did not apply (title not found, wrong state)
- ERROR     malformed input or a rule violation; `error` names the kind
"""

from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from common.logging_utils import log_message
from common.models import CatalogReply, CatalogRequest, FineSnapshot
from .catalog import Catalog
from .copy import Copy
from .errors import CirculationError


def fine_snapshot(copy: Optional[Copy]) -> Optional[FineSnapshot]:
    if copy is None or copy.current_fine is None:
        return None
    fine = copy.current_fine
    return FineSnapshot(
        key=fine.key,
        borrowerName=fine.borrower_name,
        daysOverdue=fine.days_overdue,
        amountDue=fine.amount_due,
        amountPaid=fine.amount_paid,
        amountRemaining=fine.amount_remaining,
        settled=fine.is_settled,
        waived=fine.waived,
        waiveReason=fine.waive_reason,
    )


class CatalogRouter:
    """Handles routing of request messages to a Catalog"""

    def __init__(self, catalog: Catalog, pretty: bool = False):
        self.catalog = catalog
        self.pretty = pretty
        self._handlers: Dict[str, Callable[[CatalogRequest], bool]] = {
            "BORROW": lambda r: self.catalog.borrow(r.title, r.person, r.days),
            "RETURN": lambda r: self.catalog.return_copy(r.title),
            "RESERVE": lambda r: self.catalog.reserve(r.title, r.person),
            "CANCEL": lambda r: self.catalog.cancel_reservation(r.title, r.person),
            "ASSESS": lambda r: self.catalog.assess_fine(r.title),
            "PAY": lambda r: self.catalog.pay_fine(r.title, r.amount),
            "WAIVE": lambda r: self.catalog.waive_fine(r.title, r.reason),
            "RATE": lambda r: self.catalog.rate(r.title, r.rating),
        }

    def handle_request(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Route a request to the appropriate catalog operation.

        Args:
            request_data: Parsed JSON request data

        Returns:
            Reply data for the collaborator
        """
        try:
            request = CatalogRequest(**request_data)
        except ValidationError as e:
            request_id = str(request_data.get("id", "unknown"))
            log_message("RTR", request_id, "INIT", "error",
                        f"Request validation failed: {e.error_count()} errors", self.pretty)
            return CatalogReply(
                id=request_id,
                op=str(request_data.get("op", "UNKNOWN")),
                status="ERROR",
                reason=f"Invalid request: {e}",
                error="ValidationError",
            ).model_dump(mode="json")

        log_message("RTR", request.id, request.op, "received",
                    f"title={request.title!r} person={request.person!r}", self.pretty)
        return self.dispatch(request).model_dump(mode="json")

    def dispatch(self, request: CatalogRequest) -> CatalogReply:
        if request.op == "ASSESS_ALL":
            count = self.catalog.assess_all_fines()
            return CatalogReply(id=request.id, op=request.op, status="OK", count=count)

        handler = self._handlers[request.op]
        try:
            applied = handler(request)
        except CirculationError as e:
            log_message("RTR", request.id, request.op, "error",
                        f"{type(e).__name__}: {e}", self.pretty)
            return self._reply(request, "ERROR", reason=str(e), error=type(e).__name__)

        if not applied:
            return self._reply(request, "REJECTED", reason=f"{request.op} not applicable")
        return self._reply(request, "OK")

    def _reply(self, request: CatalogRequest, status: str,
               reason: Optional[str] = None, error: Optional[str] = None) -> CatalogReply:
        copy = None
        if request.title and request.title.strip():
            copy = self.catalog.find_by_title(request.title)

        return CatalogReply(
            id=request.id,
            op=request.op,
            status=status,
            reason=reason,
            error=error,
            holder=copy.holder if copy else None,
            dueDate=copy.due_date.isoformat() if copy and copy.due_date else None,
            fine=fine_snapshot(copy) if request.op in ("ASSESS", "PAY", "WAIVE") else None,
        )
