"""Plain-value views of expiry state for dashboards and list pages"""

import logging
from typing import Dict, List, Optional, Sequence

from rto_validity.domain.aggregation import (
    DashboardTile,
    aggregate,
    dashboard_tiles,
    filter_records,
    filter_tile,
)
from rto_validity.domain.dates import format_date
from rto_validity.domain.exceptions import ValidationError
from rto_validity.domain.expiry import (
    ExpiryRules,
    UrgencyBucket,
    build_expiry_rules,
    classify,
    is_expiring_soon,
    is_renewal_due,
    status_for,
)
from rto_validity.domain.licences import (
    eligible_for_driving_licence,
    learning_licences_expiring_soon,
    licence_expiry_report,
)
from rto_validity.domain.models import Context, DrivingLicence, NationalPermit
from rto_validity.services.ports import Clock, Record
from rto_validity.services.schemas import DashboardTilesView, RenewalRecordView, TrackView


class DashboardService:
    """Every read goes through the clock, so nothing here is cached or stored"""

    def __init__(self, clock: Clock, rules: ExpiryRules | None = None):
        self.clock = clock
        self.rules = rules if rules is not None else build_expiry_rules()

    def tiles(self, permits: Sequence[NationalPermit]) -> DashboardTilesView:
        counts = dashboard_tiles(permits, self.clock.today(), self.rules)
        return DashboardTilesView(**{tile.value: count for tile, count in counts.items()})

    def tile_list(self, permits: Sequence[NationalPermit], tile: DashboardTile) -> List[NationalPermit]:
        return filter_tile(permits, tile, self.clock.today(), self.rules)

    def bucket_counts(self, records: Sequence[Record], context: Context) -> Dict[UrgencyBucket, int]:
        return aggregate(records, context, self.clock.today(), self.rules)

    def bucket_list(self, records: Sequence[Record], context: Context, bucket: UrgencyBucket) -> List[Record]:
        return filter_records(records, bucket, context, self.clock.today(), self.rules)

    def track_view(self, record: Record, context: Context) -> Optional[TrackView]:
        """Current segment of a part with its urgency; None for parts not issued"""
        try:
            track = record.track(context)
        except ValidationError as e:
            logging.warning(
                f"No {context.value} view for record: {e}",
                extra={"record_id": getattr(record, "record_id", None), "context": context.value},
            )
            return None
        if track is None:
            return None

        today = self.clock.today()
        window = track.window
        classification = classify(window.end_date, today, context, self.rules)

        return TrackView(
            part=context,
            identifier_number=track.identifier_number,
            valid_from=format_date(window.start_date),
            valid_to=format_date(window.end_date),
            days_remaining=classification.days_remaining,
            bucket=classification.bucket,
            status=status_for(classification, context, self.rules),
            expiring_soon=is_expiring_soon(classification, context, self.rules),
            renew_due=is_renewal_due(window.end_date, today),
            history=[RenewalRecordView.from_record(r) for r in track.newest_first()],
        )

    def renew_buttons(self, permit: NationalPermit) -> Dict[Context, bool]:
        """Which renew buttons to show; a part that was never issued has none"""
        today = self.clock.today()
        buttons = {}
        for context in (Context.PART_A, Context.PART_B):
            end = permit.expiry_date(context)
            buttons[context] = end is not None and is_renewal_due(end, today)
        return buttons

    def licence_report(self, licences: Sequence[DrivingLicence]) -> Dict[UrgencyBucket, List[DrivingLicence]]:
        return licence_expiry_report(licences, self.clock.today(), self.rules)

    def learning_licences_expiring(self, licences: Sequence[DrivingLicence]) -> List[DrivingLicence]:
        return learning_licences_expiring_soon(licences, self.clock.today(), self.rules)

    def eligible_for_driving_licence(self, licences: Sequence[DrivingLicence]) -> List[DrivingLicence]:
        return eligible_for_driving_licence(licences, self.clock.today())
