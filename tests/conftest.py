"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

from rto_validity.domain.exceptions import BillGenerationError, RecordNotFoundError
from rto_validity.domain.models import (
    BillReference,
    Context,
    DrivingLicence,
    NationalPermit,
    Payment,
    ValidityWindow,
)
from rto_validity.domain.renewals import issue_track
from rto_validity.infrastructure.clock import FixedClock


TODAY = date(2025, 6, 15)


class InMemoryPermitRepository:
    """Dict-backed stand-in for the persistence collaborator"""

    def __init__(self):
        self.records: Dict[str, object] = {}
        self.saves: List[object] = []

    def load_permit(self, record_id: str):
        try:
            return self.records[record_id]
        except KeyError:
            raise RecordNotFoundError(f"No record with id {record_id}") from None

    def save_permit(self, record) -> None:
        self.records[record.record_id] = record
        self.saves.append(record)


class RecordingBillGenerator:
    """Bill generator double that remembers every call"""

    def __init__(self):
        self.calls: List[tuple] = []

    def generate(self, identifier_number: str, segment: ValidityWindow, fees: int) -> BillReference:
        self.calls.append((identifier_number, segment, fees))
        bill_number = f"BILL-2025-{len(self.calls):04d}"
        return BillReference(bill_number=bill_number, bill_path=f"/uploads/bills/{bill_number}.pdf")


class FailingBillGenerator:
    def generate(self, identifier_number: str, segment: ValidityWindow, fees: int) -> BillReference:
        raise BillGenerationError("PDF renderer unavailable")


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to 15-06-2025 10:30"""
    return FixedClock(datetime(2025, 6, 15, 10, 30))


@pytest.fixture
def repository() -> InMemoryPermitRepository:
    return InMemoryPermitRepository()


@pytest.fixture
def bill_generator() -> RecordingBillGenerator:
    return RecordingBillGenerator()


@pytest.fixture
def failing_bill_generator() -> FailingBillGenerator:
    return FailingBillGenerator()


@pytest.fixture
def permit_factory() -> Callable[..., NationalPermit]:
    """
    Build a national permit whose Part A / Part B end a given number of
    days from TODAY (None leaves Part B unissued).
    """

    def build(
        permit_id: str = "NP-1",
        part_a_days: int = 400,
        part_b_days: Optional[int] = 200,
        total: int = 20000,
        paid: int = 20000,
    ) -> NationalPermit:
        issued_at = datetime(2024, 1, 1, 9, 0)
        part_a_end = TODAY + timedelta(days=part_a_days)
        part_a = issue_track(
            Context.PART_A,
            ValidityWindow(part_a_end - timedelta(days=5 * 365), part_a_end),
            f"PA-{permit_id}",
            15000,
            issued_at,
        )
        part_b = None
        if part_b_days is not None:
            part_b_end = TODAY + timedelta(days=part_b_days)
            part_b = issue_track(
                Context.PART_B,
                ValidityWindow(part_b_end - timedelta(days=364), part_b_end),
                f"PB-{permit_id}",
                5000,
                issued_at,
            )
        return NationalPermit(
            permit_id=permit_id,
            permit_number=f"PA-{permit_id}",
            permit_holder="RAMESH KUMAR",
            vehicle_number="CG04AA1234",
            part_a=part_a,
            part_b=part_b,
            payment=Payment(total=total, paid=paid),
        )

    return build


@pytest.fixture
def licence_factory() -> Callable[..., DrivingLicence]:
    """Driving licence with optional DL / LL windows relative to TODAY"""

    def build(
        licence_id: str = "DL-1",
        licence_days: Optional[int] = None,
        ll_issued_days_ago: Optional[int] = None,
        ll_days: Optional[int] = None,
    ) -> DrivingLicence:
        licence = None
        if licence_days is not None:
            end = TODAY + timedelta(days=licence_days)
            licence = issue_track(
                Context.DRIVING_LICENCE,
                ValidityWindow(end - timedelta(days=3650), end),
                f"CG04{licence_id}",
                1000,
                datetime(2020, 1, 1, 9, 0),
            )

        learning = None
        if ll_days is not None:
            issued = TODAY - timedelta(days=ll_issued_days_ago or 0)
            learning = ValidityWindow(issued, TODAY + timedelta(days=ll_days))

        return DrivingLicence(
            licence_id=licence_id,
            holder_name="SUNITA VERMA",
            licence=licence,
            payment=Payment(total=1500, paid=1500),
            learning_licence_number=f"LL-{licence_id}" if learning else None,
            learning_licence=learning,
        )

    return build
