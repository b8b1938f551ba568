import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from estimate_dashboard.base.model import BaseModel
from estimate_dashboard.type_defs import JsonObject

NULLABLE_TEXT_FIELDS = ("dateReceived", "timeReceived", "dateReturned", "timeReturned")


class EstimateType(StrEnum):
    INITIAL = "Initial"
    FINAL = "Final"


class EstimateStatus(StrEnum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


@dataclass
class Estimate(BaseModel):
    id: int | None
    estimate_type: EstimateType | str = EstimateType.INITIAL
    claim_number: str = ""
    client_name: str = ""
    task_number: str = ""
    date_received: str | None = None
    time_received: str | None = None
    status: EstimateStatus | str = EstimateStatus.NOT_STARTED
    date_returned: str | None = None
    time_returned: str | None = None
    estimate_amount: float | str | None = None
    ai_predicted_days: int | None = None
    client_billed: bool = False

    @property
    def is_done(self) -> bool:
        return self.status == EstimateStatus.DONE

    @property
    def is_billable(self) -> bool:
        return self.estimate_type == EstimateType.FINAL and self.is_done and not self.client_billed

    @property
    def amount_value(self) -> float:
        """Dollar amount as a float, 0.0 when blank or not a number."""
        amount = _coerce_number(self.estimate_amount)
        return amount if amount is not None else 0.0


def _coerce_number(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        stripped_value = value.strip()
        if stripped_value == "":
            return None
        try:
            number = float(stripped_value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _coerce_days(value: object) -> int | None:
    number = _coerce_number(value)
    if number is None:
        return None
    return int(round(number))


def normalize_for_remote(record: Mapping[str, Any]) -> JsonObject:
    """Shape one estimate record for the remote table.

    Blank date/time strings become null, the amount and predicted days become
    numbers (or null when blank or unparseable) and ``clientBilled`` becomes a
    strict boolean. Applying it twice gives the same result as applying it once.
    """
    normalized: JsonObject = dict(record)
    for key in NULLABLE_TEXT_FIELDS:
        normalized[key] = record.get(key) or None
    normalized["estimateAmount"] = _coerce_number(record.get("estimateAmount"))
    normalized["aiPredictedDays"] = _coerce_days(record.get("aiPredictedDays"))
    normalized["clientBilled"] = bool(record.get("clientBilled"))
    return normalized
