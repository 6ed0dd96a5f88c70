"""
Circulation tools for the Smart Library server.

Exposes the lending engine to tool clients:
1. checkout_item: lend an available item to a patron
2. return_item: take an item back
3. overdue_report: list open loans past their due time, with penalties

Refused checkouts and returns are ordinary outcomes of the lending engine;
they come back as ``isError`` responses carrying the refusal reason.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..services.lending import LendingEngine, LendingOutcome

logger = logging.getLogger(__name__)


class CirculationInput(BaseModel):
    """Input schema shared by checkout_item and return_item."""

    patron_id: str = Field(
        ...,
        description="Identifier of the patron",
        min_length=1,
        examples=["3f2b9c1e6a7d4e0f9b8a7c6d5e4f3a2b"],
    )

    item_key: str = Field(
        ...,
        description="Catalog key of the item",
        min_length=1,
        examples=["9780134685479"],
    )


class OverdueReportInput(BaseModel):
    """Input schema for the overdue_report tool."""

    patron_id: str | None = Field(
        default=None,
        description="Only report loans of this patron",
    )


def _error(text: str) -> dict[str, Any]:
    return {"isError": True, "content": [{"type": "text", "text": text}]}


def _outcome_response(outcome: LendingOutcome) -> dict[str, Any]:
    if not outcome:
        return {
            "isError": True,
            "content": [{"type": "text", "text": outcome.message}],
            "data": {"reason": outcome.reason.value if outcome.reason else None},
        }

    loan = outcome.loan
    return {
        "content": [{"type": "text", "text": outcome.message}],
        "data": {
            "loan": {
                "item_key": loan.item_key,
                "title": loan.title,
                "category": loan.category,
                "checked_out_at": loan.checked_out_at.isoformat(),
                "due_at": loan.due_at.isoformat(),
                "returned_at": loan.returned_at.isoformat() if loan.returned_at else None,
                "due_period_days": loan.due_period_days,
            }
        },
    }


def build_circulation_tools(engine: LendingEngine) -> list[dict[str, Any]]:
    """Tool definitions bound to ``engine``."""

    async def checkout_item_handler(arguments: dict[str, Any]) -> dict[str, Any]:
        """Handler for the checkout_item tool."""
        try:
            params = CirculationInput.model_validate(arguments)
        except ValidationError as e:
            logger.warning("Invalid checkout parameters: %s", e)
            return _error(f"Invalid checkout parameters: {e}")

        try:
            outcome = engine.checkout(params.patron_id, params.item_key)
        except Exception as e:
            logger.exception("Unexpected error in checkout_item tool")
            return _error(f"An unexpected error occurred: {e!s}")

        if not outcome:
            logger.info("Checkout refused (%s): %s", outcome.reason, outcome.message)
        return _outcome_response(outcome)

    async def return_item_handler(arguments: dict[str, Any]) -> dict[str, Any]:
        """Handler for the return_item tool."""
        try:
            params = CirculationInput.model_validate(arguments)
        except ValidationError as e:
            logger.warning("Invalid return parameters: %s", e)
            return _error(f"Invalid return parameters: {e}")

        try:
            outcome = engine.return_item(params.patron_id, params.item_key)
        except Exception as e:
            logger.exception("Unexpected error in return_item tool")
            return _error(f"An unexpected error occurred: {e!s}")

        if not outcome:
            logger.info("Return refused (%s): %s", outcome.reason, outcome.message)
        return _outcome_response(outcome)

    async def overdue_report_handler(arguments: dict[str, Any]) -> dict[str, Any]:
        """Handler for the overdue_report tool."""
        try:
            params = OverdueReportInput.model_validate(arguments or {})
        except ValidationError as e:
            return _error(f"Invalid overdue report parameters: {e}")

        try:
            notices = engine.overdue_report()
        except Exception as e:
            logger.exception("Unexpected error in overdue_report tool")
            return _error(f"An unexpected error occurred: {e!s}")

        if params.patron_id is not None:
            notices = [n for n in notices if n.patron_id == params.patron_id]

        if notices:
            lines = [
                f"- {n.patron_name}: '{n.item_title}' {n.overdue_days} day(s) late, penalty {n.penalty:.2f}"
                for n in notices
            ]
            text = f"{len(notices)} overdue loan(s):\n" + "\n".join(lines)
        else:
            text = "No overdue loans."

        return {
            "content": [{"type": "text", "text": text}],
            "data": {
                "overdue": [n.model_dump() for n in notices],
                "total_penalty": sum(n.penalty for n in notices),
            },
        }

    return [
        {
            "name": "checkout_item",
            "description": (
                "Lend an available catalog item to a patron. The loan period depends on "
                "the item type: books 14 days, periodicals 7 days, theses 21 days."
            ),
            "inputSchema": CirculationInput.model_json_schema(),
            "handler": checkout_item_handler,
        },
        {
            "name": "return_item",
            "description": "Return an item the patron currently has on loan.",
            "inputSchema": CirculationInput.model_json_schema(),
            "handler": return_item_handler,
        },
        {
            "name": "overdue_report",
            "description": (
                "List loans past their due date with the penalty accrued so far, "
                "optionally for a single patron."
            ),
            "inputSchema": OverdueReportInput.model_json_schema(),
            "handler": overdue_report_handler,
        },
    ]
