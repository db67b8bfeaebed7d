"""Interfaces of the collaborators the engine calls out to"""

from datetime import date, datetime
from typing import Protocol, Union

from rto_validity.domain.models import BillReference, DrivingLicence, NationalPermit, ValidityWindow

Record = Union[NationalPermit, DrivingLicence]


class Clock(Protocol):
    def today(self) -> date: ...

    def now(self) -> datetime: ...


class PermitRepository(Protocol):
    """
    Persistence collaborator.

    Must give read-your-writes per record. load_permit raises
    RecordNotFoundError for unknown ids.
    """

    def load_permit(self, record_id: str) -> Record: ...

    def save_permit(self, record: Record) -> None: ...


class BillGenerator(Protocol):
    """Renders the bill for a renewal; raises BillGenerationError on failure"""

    def generate(self, identifier_number: str, segment: ValidityWindow, fees: int) -> BillReference: ...
