"""Validity duration rules - end date from a start date and a duration policy"""

import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Optional

from rto_validity.domain.dates import format_date, format_date_input, normalize
from rto_validity.domain.exceptions import (
    InvariantViolation,
    NormalizationError,
    ValidationError,
)
from rto_validity.domain.models import DurationPolicy, ValidityWindow, has_value
from rto_validity.utils.date_utils import shift_date


def compute_end(start: date, policy: DurationPolicy) -> date:
    """
    Last valid day of a span starting on `start`.

    The span is inclusive of both ends, so the end is one day before the
    anniversary: 24-01-2025 on a five year permit ends 23-01-2030.
    """
    anniversary = shift_date(start, years=policy.years, months=policy.months, days=policy.days)
    end = anniversary - timedelta(days=1)

    if end < start:
        logging.error(
            "Computed end date precedes start date",
            extra={"start": start.isoformat(), "end": end.isoformat(), "policy": policy.name},
        )
        raise InvariantViolation(f"{policy.name} from {start} produced end date {end}")

    return end


def compute_window(start: date, policy: DurationPolicy) -> ValidityWindow:
    return ValidityWindow(start_date=start, end_date=compute_end(start, policy))


@dataclass(frozen=True)
class ValidityDraft:
    """
    "Valid from" / "valid to" pair while a form is being filled in.

    Only the typed start and the policy are kept. The end date is derived
    from the start whenever the start parses; an end typed by hand is kept
    as an override until the start changes again. The end never feeds back
    into the start.
    """

    policy: DurationPolicy
    start_input: str = ""
    end_input: str = ""

    def with_start_input(self, raw: str) -> "ValidityDraft":
        return replace(self, start_input=format_date_input(raw), end_input="")

    def with_end_input(self, raw: str) -> "ValidityDraft":
        return replace(self, end_input=format_date_input(raw))

    @property
    def start_date(self) -> Optional[date]:
        try:
            return normalize(self.start_input)
        except NormalizationError:
            return None

    @property
    def end_date(self) -> Optional[date]:
        if has_value(self.end_input):
            try:
                return normalize(self.end_input)
            except NormalizationError:
                return None
        start = self.start_date
        return compute_end(start, self.policy) if start is not None else None

    @property
    def end_display(self) -> str:
        end = self.end_date
        return format_date(end) if end is not None else self.end_input

    def to_window(self) -> ValidityWindow:
        """
        Raises:
            NormalizationError: If the start or an explicit end does not parse
            ValidationError: If an explicit end falls before the start
        """
        start = normalize(self.start_input)
        if has_value(self.end_input):
            end = normalize(self.end_input)
            if end < start:
                raise ValidationError("Valid to cannot be before valid from", field="valid_to")
            return ValidityWindow(start_date=start, end_date=end)
        return compute_window(start, self.policy)
