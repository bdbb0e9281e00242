"""CSV import and CSV/JSON export for batch assessments"""

import csv
import io
import json
import math
from typing import Any, Callable, Dict, List

from fundability_engine.batch.processor import BatchResult

CSV_HEADERS = [
    "Name",
    "Email",
    "Score",
    "Tier",
    "Tier Label",
    "Funding Range Now",
    "Funding Range Optimized",
    "Key Strengths",
    "Key Risks",
    "Top Actions",
    "High Risk Flag",
    "Status",
]

CSV_TOP_ACTIONS = 3

CSV_TEMPLATE = """first_name,last_name,email,credit_score,revolving_utilization_pct,dti_pct,inquiries_6m,oldest_account_years,open_tradelines,recent_derogs_24m,bk_or_major_event,requested_amount,primary_goal
John,Smith,john.smith@example.com,720,35,32,2,8,7,0,false,50000,business_funding
Jane,Doe,jane.doe@example.com,680,55,45,4,5,5,1,false,25000,debt_consolidation
Mike,Johnson,mike.j@example.com,780,15,20,0,12,10,0,false,100000,startup_funding"""


def _number(value: str) -> Any:
    # Unparseable numbers pass through as text so validation reports them
    try:
        number = float(value)
    except ValueError:
        return value
    return int(number) if number.is_integer() else number


def _integer(value: str) -> Any:
    number = _number(value)
    if isinstance(number, float) and math.isfinite(number):
        return int(number)
    return number


def _integer_or_zero(value: str) -> Any:
    number = _integer(value)
    return number if isinstance(number, int) else 0


def _number_or_zero(value: str) -> Any:
    number = _number(value)
    return number if isinstance(number, (int, float)) else 0


def _flag(value: str) -> bool:
    return value.lower() in ("true", "yes")


# header alias -> (input field, converter)
COLUMN_MAP: Dict[str, tuple[str, Callable[[str], Any]]] = {
    "first_name": ("first_name", str),
    "firstname": ("first_name", str),
    "last_name": ("last_name", str),
    "lastname": ("last_name", str),
    "email": ("email", str),
    "credit_score": ("credit_score", _integer),
    "creditscore": ("credit_score", _integer),
    "revolving_utilization_pct": ("revolving_utilization_pct", _number),
    "utilization": ("revolving_utilization_pct", _number),
    "utilization_pct": ("revolving_utilization_pct", _number),
    "dti_pct": ("dti_pct", _number),
    "dti": ("dti_pct", _number),
    "inquiries_6m": ("inquiries_6m", _integer_or_zero),
    "inquiries": ("inquiries_6m", _integer_or_zero),
    "oldest_account_years": ("oldest_account_years", _number_or_zero),
    "account_age": ("oldest_account_years", _number_or_zero),
    "open_tradelines": ("open_tradelines", _integer),
    "tradelines": ("open_tradelines", _integer),
    "recent_derogs_24m": ("recent_derogs_24m", _integer_or_zero),
    "derogs": ("recent_derogs_24m", _integer_or_zero),
    "bk_or_major_event": ("bk_or_major_event", _flag),
    "bankruptcy": ("bk_or_major_event", _flag),
    "requested_amount": ("requested_amount", _number),
    "amount": ("requested_amount", _number),
    "primary_goal": ("primary_goal", str),
    "goal": ("primary_goal", str),
}


def parse_csv_to_clients(csv_content: str) -> List[Dict[str, Any]]:
    """
    Parse a CSV export into untyped input records.

    The header row may use the canonical snake_case field names or the short
    aliases in COLUMN_MAP (case-insensitive). Blank lines and empty cells are
    skipped; unknown columns are ignored.
    """
    rows = csv.reader(io.StringIO(csv_content.lstrip("\ufeff")))
    try:
        headers = [header.strip().lower() for header in next(rows)]
    except StopIteration:
        return []

    clients = []
    for row in rows:
        if not any(cell.strip() for cell in row):
            continue

        client: Dict[str, Any] = {}
        for header, cell in zip(headers, row):
            value = cell.strip()
            if not value or header not in COLUMN_MAP:
                continue
            field_name, convert = COLUMN_MAP[header]
            client[field_name] = convert(value)

        clients.append(client)

    return clients


def export_to_csv(batch_result: BatchResult) -> str:
    """Render batch results as CSV: successes first, then failures"""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for item in batch_result.success:
        snapshot = item.result
        writer.writerow([
            item.client["name"],
            item.client["email"],
            snapshot.fundability_score,
            snapshot.fundability_tier_numeric,
            snapshot.fundability_tier_label,
            snapshot.funding_range_now,
            snapshot.funding_range_after_optimization,
            "; ".join(snapshot.key_strengths),
            "; ".join(snapshot.key_risks),
            "; ".join(snapshot.high_impact_actions[:CSV_TOP_ACTIONS]),
            "Yes" if snapshot.flags.high_risk_profile else "No",
            "Success",
        ])

    for item in batch_result.failed:
        writer.writerow(
            [item.client["name"], item.client["email"]]
            + ["N/A"] * (len(CSV_HEADERS) - 3)
            + [f"Failed: {item.error}"]
        )

    return output.getvalue().rstrip("\n")


def export_to_json(batch_result: BatchResult) -> str:
    return json.dumps(batch_result.to_dict(), indent=2, ensure_ascii=False)
