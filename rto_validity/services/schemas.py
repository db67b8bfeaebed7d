"""Pydantic schemas for raw presentation input and plain-value views"""

from datetime import datetime
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from rto_validity.config import settings
from rto_validity.domain.dates import complete_date_input, format_date
from rto_validity.domain.exceptions import ValidationError
from rto_validity.domain.expiry import RecordStatus, UrgencyBucket
from rto_validity.domain.models import Context, PaymentStatus, RenewalRecord, optional_text

Model = TypeVar("Model", bound=BaseModel)


def default_fee(part: Context) -> Optional[int]:
    return {
        Context.PART_A: settings.part_a_default_fee,
        Context.PART_B: settings.part_b_default_fee,
    }.get(part)


def parse_request(model: Type[Model], data) -> Model:
    """Validate raw input, reporting the first problem as a field-level ValidationError"""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(first["msg"], field=field) from e


class _DateFormModel(BaseModel):
    """Blank / "N/A" text collapses to None; dates are completed as on blur"""

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            return optional_text(value)
        return value


class RenewPartRequest(_DateFormModel):
    """Renew one part of a permit or licence"""

    record_id: str = Field(..., min_length=1, description="Permit or licence id")
    part: Context
    identifier_number: Optional[str] = Field(None, description="New permit / authorization / licence number")
    valid_from: Optional[str] = None
    valid_to: Optional[str] = Field(None, description="Computed from the part's policy when omitted")
    fees: Optional[int] = Field(None, description="Rupees; the part's default fee when omitted")
    payment_status: PaymentStatus = PaymentStatus.PAID
    notes: Optional[str] = None

    @field_validator("valid_from", "valid_to")
    @classmethod
    def _complete_date(cls, value: Optional[str]) -> Optional[str]:
        return complete_date_input(value) if value else value

    def resolved_fees(self) -> Optional[int]:
        return self.fees if self.fees is not None else default_fee(self.part)


class IssuePermitRequest(_DateFormModel):
    """Issue a new national permit with Part A and optionally Part B"""

    permit_id: str = Field(..., min_length=1)
    permit_number: Optional[str] = None
    permit_holder: Optional[str] = None
    vehicle_number: Optional[str] = None
    valid_from: Optional[str] = None
    valid_to: Optional[str] = None
    part_a_fees: Optional[int] = None
    part_b_number: Optional[str] = None
    part_b_valid_from: Optional[str] = None
    part_b_valid_to: Optional[str] = None
    part_b_fees: Optional[int] = None
    total_fee: int = 0
    paid: int = 0
    notes: Optional[str] = None

    @field_validator("valid_from", "valid_to", "part_b_valid_from", "part_b_valid_to")
    @classmethod
    def _complete_date(cls, value: Optional[str]) -> Optional[str]:
        return complete_date_input(value) if value else value


class RenewalRecordView(BaseModel):
    """One history row as the presentation layer shows it"""

    is_original: bool
    identifier_number: str
    valid_from: str
    valid_to: str
    fees: int
    payment_status: PaymentStatus
    renewal_date: datetime
    notes: Optional[str] = None
    bill_number: Optional[str] = None
    bill_path: Optional[str] = None

    @classmethod
    def from_record(cls, record: RenewalRecord) -> "RenewalRecordView":
        return cls(
            is_original=record.is_original,
            identifier_number=record.identifier_number,
            valid_from=format_date(record.segment.start_date),
            valid_to=format_date(record.segment.end_date),
            fees=record.fees,
            payment_status=record.payment_status,
            renewal_date=record.renewal_date,
            notes=record.notes,
            bill_number=record.bill.bill_number if record.bill else None,
            bill_path=record.bill.bill_path if record.bill else None,
        )


class TrackView(BaseModel):
    """Current state of one part with its history, newest first"""

    part: Context
    identifier_number: str
    valid_from: str
    valid_to: str
    days_remaining: int
    bucket: UrgencyBucket
    status: RecordStatus
    expiring_soon: bool
    renew_due: bool
    history: List[RenewalRecordView]


class DashboardTilesView(BaseModel):
    total: int
    active: int
    part_a_expiring: int
    part_b_expiring: int
    pending_payment: int
