"""Domain models - pure Python dataclasses representing permits, licences and their validity"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Tuple

from rto_validity.domain.exceptions import InvariantViolation, ValidationError

# Placeholder the office writes into empty fields
NOT_AVAILABLE = "N/A"


def has_value(value: Any) -> bool:
    """True when a field is present and not the "N/A" placeholder"""
    if value is None:
        return False
    if isinstance(value, str):
        stripped = value.strip()
        return bool(stripped) and stripped.upper() != NOT_AVAILABLE
    return True


def optional_text(value: Any) -> Optional[str]:
    """Collapse empty strings and "N/A" to None, strip everything else"""
    if not has_value(value):
        return None
    return str(value).strip()


class Context(str, Enum):
    """Which validity track of a record is being looked at"""

    PART_A = "part_a"
    PART_B = "part_b"
    DRIVING_LICENCE = "driving_licence"
    LEARNING_LICENCE = "learning_licence"


class DurationPolicy(Enum):
    """Named validity spans: (years, months, days)"""

    FIVE_YEAR_PERMIT = (5, 0, 0)
    ONE_YEAR_AUTHORIZATION = (1, 0, 0)
    LEARNING_LICENCE = (0, 6, 0)
    THIRTY_DAY_WINDOW = (0, 0, 30)

    def __init__(self, years: int, months: int, days: int):
        self.years = years
        self.months = months
        self.days = days


class PaymentStatus(str, Enum):
    PAID = "Paid"
    PENDING = "Pending"


@dataclass(frozen=True)
class ValidityWindow:
    """Closed date range a permit or licence part is valid for"""

    start_date: date
    end_date: date

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise InvariantViolation(
                f"Validity window ends ({self.end_date}) before it starts ({self.start_date})"
            )

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class BillReference:
    """Output of the external bill generator"""

    bill_number: str
    bill_path: Optional[str] = None


@dataclass(frozen=True)
class RenewalRecord:
    """One archived validity segment of a permit or licence part"""

    is_original: bool
    segment: ValidityWindow
    identifier_number: str
    fees: int  # rupees
    payment_status: PaymentStatus
    renewal_date: datetime
    notes: Optional[str] = None
    bill: Optional[BillReference] = None


@dataclass(frozen=True)
class ValidityTrack:
    """
    Append-only renewal history of one part.

    History is stored oldest-first: index 0 is the original issuance and the
    last entry is the segment currently in force.
    """

    context: Context
    history: Tuple[RenewalRecord, ...]
    policy: Optional[DurationPolicy] = None

    def __post_init__(self):
        if not self.history:
            raise InvariantViolation(f"{self.context.value} track has no issuance record")
        originals = [r for r in self.history if r.is_original]
        if len(originals) != 1 or not self.history[0].is_original:
            raise InvariantViolation(
                f"{self.context.value} track must start with exactly one original record"
            )

    @property
    def current(self) -> RenewalRecord:
        return self.history[-1]

    @property
    def original(self) -> RenewalRecord:
        return self.history[0]

    @property
    def window(self) -> ValidityWindow:
        return self.current.segment

    @property
    def identifier_number(self) -> str:
        return self.current.identifier_number

    def newest_first(self) -> Tuple[RenewalRecord, ...]:
        return tuple(reversed(self.history))

    def appended(self, record: RenewalRecord) -> "ValidityTrack":
        return replace(self, history=self.history + (record,))


@dataclass(frozen=True)
class Payment:
    """Fee ledger of a record, in rupees"""

    total: int
    paid: int

    @property
    def balance(self) -> int:
        return self.total - self.paid

    @property
    def is_pending(self) -> bool:
        return self.balance > 0


@dataclass(frozen=True)
class NationalPermit:
    """National goods permit: 5-year Part A plus yearly Part B authorization"""

    permit_id: str
    permit_number: str
    permit_holder: str
    vehicle_number: str
    part_a: ValidityTrack
    part_b: Optional[ValidityTrack]
    payment: Payment
    notes: Optional[str] = None

    def track(self, context: Context) -> Optional[ValidityTrack]:
        if context == Context.PART_A:
            return self.part_a
        if context == Context.PART_B:
            return self.part_b
        raise ValidationError(f"National permit has no {context.value} track", field="part")

    def with_track(self, context: Context, track: ValidityTrack) -> "NationalPermit":
        if context == Context.PART_A:
            return replace(self, part_a=track)
        if context == Context.PART_B:
            return replace(self, part_b=track)
        raise ValidationError(f"National permit has no {context.value} track", field="part")

    def expiry_date(self, context: Context) -> Optional[date]:
        track = self.track(context)
        return track.window.end_date if track is not None else None

    @property
    def record_id(self) -> str:
        return self.permit_id


@dataclass(frozen=True)
class DrivingLicence:
    """Driving licence application with its learning licence sub-window"""

    licence_id: str
    holder_name: str
    licence: Optional[ValidityTrack]
    payment: Payment
    learning_licence_number: Optional[str] = None
    learning_licence: Optional[ValidityWindow] = None

    def track(self, context: Context) -> Optional[ValidityTrack]:
        if context == Context.DRIVING_LICENCE:
            return self.licence
        raise ValidationError(f"Driving licence has no renewable {context.value} track", field="part")

    def with_track(self, context: Context, track: ValidityTrack) -> "DrivingLicence":
        if context == Context.DRIVING_LICENCE:
            return replace(self, licence=track)
        raise ValidationError(f"Driving licence has no renewable {context.value} track", field="part")

    def expiry_date(self, context: Context) -> Optional[date]:
        if context == Context.LEARNING_LICENCE:
            return self.learning_licence.end_date if self.learning_licence else None
        track = self.track(context)
        return track.window.end_date if track is not None else None

    @property
    def record_id(self) -> str:
        return self.licence_id
