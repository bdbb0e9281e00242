"""Input validation for fundability assessments"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from fundability_engine.api.v1.schemas import FundabilityRequest
from fundability_engine.domain.exceptions import InputValidationError
from fundability_engine.domain.models import FundabilityInput, PrimaryGoal

# Field -> message reported for any violation on that field, in report order
FIELD_MESSAGES: Dict[str, str] = {
    "first_name": "first_name is required and must be a string",
    "last_name": "last_name is required and must be a string",
    "email": "email is required and must be a valid email address",
    "credit_score": "credit_score must be between 300 and 850, or null",
    "revolving_utilization_pct": "revolving_utilization_pct is required and must be between 0 and 100",
    "dti_pct": "dti_pct must be between 0 and 100, or null",
    "inquiries_6m": "inquiries_6m must be a non-negative integer",
    "oldest_account_years": "oldest_account_years must be a non-negative number",
    "open_tradelines": "open_tradelines is required and must be a non-negative integer",
    "recent_derogs_24m": "recent_derogs_24m must be a non-negative integer",
    "bk_or_major_event": "bk_or_major_event must be a boolean",
    "requested_amount": "requested_amount is required and must be a positive number",
    "primary_goal": f"primary_goal is required and must be one of: {', '.join(PrimaryGoal.values())}",
}


@dataclass
class ValidationResult:
    valid: bool
    data: Optional[FundabilityInput] = None
    errors: List[str] = field(default_factory=list)


def error_messages(error: ValidationError) -> List[str]:
    """One message per invalid field, in FIELD_MESSAGES order"""
    invalid = {str(detail["loc"][0]) for detail in error.errors() if detail["loc"]}
    return [message for name, message in FIELD_MESSAGES.items() if name in invalid]


def validate_input(body: Any) -> ValidationResult:
    """
    Validate an untyped request body against the assessment input contract.

    Every violated constraint produces one message naming the field; nothing
    short-circuits. Defaults (inquiries_6m=0, oldest_account_years=0,
    recent_derogs_24m=0, bk_or_major_event=False) also replace explicit nulls.
    """
    if not isinstance(body, Mapping):
        return ValidationResult(valid=False, errors=["Request body must be a JSON object"])

    try:
        request = FundabilityRequest.model_validate(dict(body))
    except ValidationError as e:
        return ValidationResult(valid=False, errors=error_messages(e))

    return ValidationResult(valid=True, data=FundabilityInput(**request.model_dump()))


def ensure_valid(body: Any) -> FundabilityInput:
    """
    Validate and return the typed input.

    Raises:
        InputValidationError: With every violated constraint
    """
    result = validate_input(body)
    if not result.valid:
        raise InputValidationError(result.errors)
    return result.data
