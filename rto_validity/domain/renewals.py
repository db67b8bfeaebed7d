"""Issuance and renewal history - core business logic for validity tracks"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, TypeVar, Union

from rto_validity.config import settings
from rto_validity.domain.dates import normalize
from rto_validity.domain.durations import compute_window
from rto_validity.domain.exceptions import InvariantViolation, NormalizationError, ValidationError
from rto_validity.domain.models import (
    BillReference,
    Context,
    DrivingLicence,
    DurationPolicy,
    NationalPermit,
    Payment,
    PaymentStatus,
    RenewalRecord,
    ValidityTrack,
    ValidityWindow,
    has_value,
    optional_text,
)

Renewable = TypeVar("Renewable", NationalPermit, DrivingLicence)

# Default duration policy of each renewable part
POLICIES = {
    Context.PART_A: DurationPolicy.FIVE_YEAR_PERMIT,
    Context.PART_B: DurationPolicy.ONE_YEAR_AUTHORIZATION,
    Context.DRIVING_LICENCE: None,
}


@dataclass(frozen=True)
class RenewalResult:
    """Updated record plus the history entry the renewal appended"""

    record: Union[NationalPermit, DrivingLicence]
    renewal: RenewalRecord
    superseded: ValidityWindow


def validate_renewal_input(identifier_number: str, fees: int) -> str:
    """
    Check the fields every issuance or renewal needs.

    Returns the stripped identifier.
    """
    if not has_value(identifier_number):
        raise ValidationError("Identifier number is required", field="identifier_number")
    if fees is None or fees <= 0:
        raise ValidationError("Please enter valid fees", field="fees")
    return identifier_number.strip()


def segment_from_input(
    valid_from: str,
    valid_to: Optional[str],
    policy: Optional[DurationPolicy],
) -> ValidityWindow:
    """
    Turn raw form dates into a validity segment.

    When `valid_to` is blank the end is computed from the policy. Unparseable
    dates and an end before the start are reported as field-level
    ValidationErrors.
    """
    try:
        start = normalize(valid_from)
    except NormalizationError as e:
        raise ValidationError(str(e), field="valid_from") from e

    if not has_value(valid_to):
        if policy is None:
            raise ValidationError("Valid to is required", field="valid_to")
        return compute_window(start, policy)

    try:
        end = normalize(valid_to)
    except NormalizationError as e:
        raise ValidationError(str(e), field="valid_to") from e

    if end < start:
        raise ValidationError("Valid to cannot be before valid from", field="valid_to")
    return ValidityWindow(start_date=start, end_date=end)


def issue_track(
    context: Context,
    segment: ValidityWindow,
    identifier_number: str,
    fees: int,
    issued_at: datetime,
    payment_status: PaymentStatus = PaymentStatus.PAID,
    notes: Optional[str] = None,
    bill: Optional[BillReference] = None,
) -> ValidityTrack:
    """Start a track with its single original record"""
    identifier = validate_renewal_input(identifier_number, fees)
    original = RenewalRecord(
        is_original=True,
        segment=segment,
        identifier_number=identifier,
        fees=fees,
        payment_status=payment_status,
        renewal_date=issued_at,
        notes=optional_text(notes),
        bill=bill,
    )
    return ValidityTrack(context=context, history=(original,), policy=POLICIES.get(context))


def issue_national_permit(
    permit_id: str,
    permit_number: str,
    permit_holder: str,
    vehicle_number: str,
    part_a_segment: ValidityWindow,
    part_a_fees: int,
    payment: Payment,
    issued_at: datetime,
    part_b_number: Optional[str] = None,
    part_b_segment: Optional[ValidityWindow] = None,
    part_b_fees: Optional[int] = None,
    notes: Optional[str] = None,
) -> NationalPermit:
    """
    Create a national permit with original records for Part A and,
    when given, Part B.
    """
    if not has_value(permit_holder):
        raise ValidationError("Permit holder is required", field="permit_holder")
    if not has_value(vehicle_number):
        raise ValidationError("Vehicle number is required", field="vehicle_number")

    part_a = issue_track(Context.PART_A, part_a_segment, permit_number, part_a_fees, issued_at)

    part_b = None
    if part_b_segment is not None:
        part_b = issue_track(
            Context.PART_B,
            part_b_segment,
            part_b_number or "",
            part_b_fees if part_b_fees is not None else settings.part_b_default_fee,
            issued_at,
        )

    return NationalPermit(
        permit_id=permit_id,
        permit_number=part_a.identifier_number,
        permit_holder=permit_holder.strip(),
        vehicle_number=vehicle_number.strip().upper(),
        part_a=part_a,
        part_b=part_b,
        payment=payment,
        notes=optional_text(notes),
    )


def renew(
    current: Renewable,
    context: Context,
    new_segment: ValidityWindow,
    new_identifier: str,
    fees: int,
    renewed_at: datetime,
    notes: Optional[str] = None,
    payment_status: PaymentStatus = PaymentStatus.PAID,
) -> RenewalResult:
    """
    Renew one part of a permit or licence.

    Appends a non-original record for the new segment; earlier records,
    including the original issuance, are left untouched. The new segment
    does not have to follow on from the previous one: backdated and gapped
    renewals are accepted because paperwork routinely lags the calendar.

    Raises:
        ValidationError: Empty identifier, non-positive fees, or a part the
            record has not been issued
    """
    identifier = validate_renewal_input(new_identifier, fees)

    track = current.track(context)
    if track is None:
        raise ValidationError(f"{context.value} has not been issued yet", field="part")

    renewal = RenewalRecord(
        is_original=False,
        segment=new_segment,
        identifier_number=identifier,
        fees=fees,
        payment_status=payment_status,
        renewal_date=renewed_at,
        notes=optional_text(notes),
    )
    updated = current.with_track(context, track.appended(renewal))

    if isinstance(updated, NationalPermit) and context == Context.PART_A:
        updated = replace(updated, permit_number=identifier)

    return RenewalResult(record=updated, renewal=renewal, superseded=track.window)


def attach_bill(current: Renewable, context: Context, bill: BillReference) -> Renewable:
    """Store the generated bill on the latest record of a track"""
    track = current.track(context)
    if track is None:
        raise InvariantViolation(f"Cannot attach a bill to missing {context.value} track")
    if track.current.bill is not None:
        raise InvariantViolation(
            f"{context.value} record {track.identifier_number} already has bill {track.current.bill.bill_number}"
        )

    latest = replace(track.current, bill=bill)
    updated_track = replace(track, history=track.history[:-1] + (latest,))
    return current.with_track(context, updated_track)


def latest_renewal(track: ValidityTrack) -> Optional[RenewalRecord]:
    """Most recent non-original record, i.e. the one with the current bill"""
    renewals = [r for r in track.history if not r.is_original]
    if not renewals:
        return None
    return max(reversed(renewals), key=lambda r: r.renewal_date)
