"""Issuance and renewal entry points called by request handlers"""

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional, Union

from rto_validity.domain.dates import format_date, normalize
from rto_validity.domain.exceptions import (
    BillGenerationError,
    DomainException,
    InvariantViolation,
    NormalizationError,
    RecordNotFoundError,
    ValidationError,
)
from rto_validity.domain.models import Context, DurationPolicy, RenewalRecord
from rto_validity.domain.payments import settle_payment
from rto_validity.domain.renewals import (
    POLICIES,
    attach_bill,
    issue_national_permit,
    renew,
    segment_from_input,
)
from rto_validity.infrastructure.observability.logging import log_renewal
from rto_validity.infrastructure.observability.metrics import (
    bill_failure_counter,
    invariant_violation_counter,
    issuance_counter,
    normalization_failure_counter,
    record_renewal,
    record_validation_failure,
    renewal_duration_histogram,
)
from rto_validity.services.ports import BillGenerator, Clock, PermitRepository, Record
from rto_validity.services.schemas import (
    IssuePermitRequest,
    RenewPartRequest,
    default_fee,
    parse_request,
)


@dataclass(frozen=True)
class DateParseOutcome:
    """Result of parsing one date field; never raises"""

    value: Optional[date] = None
    display: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RenewalOutcome:
    """
    Result of an issuance or renewal.

    On failure `error` holds the domain exception and `field` names the
    offending input when there is one. A failed bill generation does not
    fail the renewal; it is reported in `bill_error`.
    """

    record: Optional[Record] = None
    renewal: Optional[RenewalRecord] = None
    error: Optional[DomainException] = None
    bill_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def field(self) -> Optional[str]:
        return getattr(self.error, "field", None)

    @property
    def message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


def parse_date_field(raw: Union[str, date, None]) -> DateParseOutcome:
    """Parse a user-entered date for display, reporting problems instead of raising"""
    try:
        value = normalize(raw)
    except NormalizationError as e:
        normalization_failure_counter.inc()
        return DateParseOutcome(display=raw if isinstance(raw, str) else "", error=e.reason)
    return DateParseOutcome(value=value, display=format_date(value))


def _rejected(e: DomainException, request_id: Optional[str]) -> RenewalOutcome:
    if isinstance(e, ValidationError):
        record_validation_failure(e.field)
        if isinstance(e.__cause__, NormalizationError):
            normalization_failure_counter.inc()
        logging.warning(f"Rejected input: {e}", extra={"request_id": request_id, "field": e.field})
    elif isinstance(e, InvariantViolation):
        invariant_violation_counter.inc()
        logging.error(f"Invariant violation: {e}", extra={"request_id": request_id})
    else:
        logging.warning(f"Operation failed: {e}", extra={"request_id": request_id})
    return RenewalOutcome(error=e)


class RenewalService:
    """Load, renew, bill and save one part of a permit or licence"""

    def __init__(
        self,
        repository: PermitRepository,
        clock: Clock,
        bill_generator: BillGenerator | None = None,
    ):
        self.repository = repository
        self.clock = clock
        self.bill_generator = bill_generator

    def renew(
        self,
        request: Union[RenewPartRequest, Mapping[str, Any]],
        request_id: Optional[str] = None,
    ) -> RenewalOutcome:
        """
        Renew a part from raw form input.

        Flow:
        1. Validate the request and complete its dates
        2. Load the record
        3. Build the new segment (end from the part's policy when omitted)
        4. Append the renewal record
        5. Generate the bill and attach it to the new record
        6. Save and return the updated record
        """
        start_time = time.time()

        try:
            req = parse_request(RenewPartRequest, request)
            record = self.repository.load_permit(req.record_id)

            segment = segment_from_input(req.valid_from, req.valid_to, POLICIES.get(req.part))
            result = renew(
                record,
                req.part,
                segment,
                req.identifier_number or "",
                req.resolved_fees(),
                renewed_at=self.clock.now(),
                notes=req.notes,
                payment_status=req.payment_status,
            )
        except (ValidationError, InvariantViolation, RecordNotFoundError) as e:
            return _rejected(e, request_id)

        updated, bill_error = self._bill(result.record, req.part, result.renewal, request_id)
        self.repository.save_permit(updated)

        duration = time.time() - start_time
        renewal_duration_histogram.observe(duration)
        record_renewal(req.part.value, result.renewal.fees)
        log_renewal(
            record_id=updated.record_id,
            part=req.part.value,
            identifier_number=result.renewal.identifier_number,
            valid_from=format_date(result.renewal.segment.start_date),
            valid_to=format_date(result.renewal.segment.end_date),
            fees=result.renewal.fees,
            duration_ms=duration * 1000,
        )

        track = updated.track(req.part)
        return RenewalOutcome(record=updated, renewal=track.current, bill_error=bill_error)

    def _bill(
        self,
        record: Record,
        part: Context,
        renewal: RenewalRecord,
        request_id: Optional[str],
    ) -> tuple[Record, Optional[str]]:
        if self.bill_generator is None:
            return record, None
        try:
            bill = self.bill_generator.generate(renewal.identifier_number, renewal.segment, renewal.fees)
        except BillGenerationError as e:
            bill_failure_counter.inc()
            logging.error(
                f"Bill generation failed: {e}",
                extra={"request_id": request_id, "identifier_number": renewal.identifier_number},
            )
            return record, str(e)
        return attach_bill(record, part, bill), None


class IssuanceService:
    """Create new national permits from raw form input"""

    def __init__(
        self,
        repository: PermitRepository,
        clock: Clock,
        bill_generator: BillGenerator | None = None,
    ):
        self.repository = repository
        self.clock = clock
        self.bill_generator = bill_generator

    def issue(
        self,
        request: Union[IssuePermitRequest, Mapping[str, Any]],
        request_id: Optional[str] = None,
    ) -> RenewalOutcome:
        try:
            req = parse_request(IssuePermitRequest, request)
            part_a_segment = segment_from_input(
                req.valid_from, req.valid_to, DurationPolicy.FIVE_YEAR_PERMIT
            )
            part_b_segment = None
            if req.part_b_number and not req.part_b_valid_from:
                raise ValidationError("Part B valid from is required", field="part_b_valid_from")
            if req.part_b_valid_from and not req.part_b_number:
                raise ValidationError("Part B authorization number is required", field="part_b_number")
            if req.part_b_valid_from:
                part_b_segment = segment_from_input(
                    req.part_b_valid_from, req.part_b_valid_to, DurationPolicy.ONE_YEAR_AUTHORIZATION
                )

            permit = issue_national_permit(
                permit_id=req.permit_id,
                permit_number=req.permit_number or "",
                permit_holder=req.permit_holder or "",
                vehicle_number=req.vehicle_number or "",
                part_a_segment=part_a_segment,
                part_a_fees=req.part_a_fees if req.part_a_fees is not None else default_fee(Context.PART_A),
                payment=settle_payment(req.total_fee, req.paid),
                issued_at=self.clock.now(),
                part_b_number=req.part_b_number,
                part_b_segment=part_b_segment,
                part_b_fees=req.part_b_fees,
                notes=req.notes,
            )
        except (ValidationError, InvariantViolation) as e:
            return _rejected(e, request_id)

        bill_error = None
        if self.bill_generator is not None:
            original = permit.part_a.original
            try:
                bill = self.bill_generator.generate(original.identifier_number, original.segment, original.fees)
                permit = attach_bill(permit, Context.PART_A, bill)
            except BillGenerationError as e:
                bill_failure_counter.inc()
                logging.error(f"Bill generation failed: {e}", extra={"request_id": request_id})
                bill_error = str(e)

        self.repository.save_permit(permit)
        issuance_counter.inc()
        logging.info(
            "Permit issued",
            extra={
                "request_id": request_id,
                "record_id": permit.permit_id,
                "permit_number": permit.permit_number,
                "valid_to": format_date(permit.part_a.window.end_date),
            },
        )

        return RenewalOutcome(record=permit, renewal=permit.part_a.original, bill_error=bill_error)
