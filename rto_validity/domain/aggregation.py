"""Bucket counts and filtered lists for dashboards"""

import logging
from datetime import date
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from rto_validity.domain.exceptions import DomainException
from rto_validity.domain.expiry import (
    Classification,
    ExpiryRules,
    RecordStatus,
    UrgencyBucket,
    build_expiry_rules,
    classify,
    status_for,
)
from rto_validity.domain.models import Context, NationalPermit

Record = TypeVar("Record")


class DashboardTile(str, Enum):
    TOTAL = "total"
    ACTIVE = "active"
    PART_A_EXPIRING = "part_a_expiring"
    PART_B_EXPIRING = "part_b_expiring"
    PENDING_PAYMENT = "pending_payment"


def classify_record(
    record: object,
    context: Context,
    today: date,
    rules: ExpiryRules,
) -> Optional[Classification]:
    """
    Classify one record, or None when it has no usable end date.

    Records without the requested track, or that cannot answer for the
    context at all, are left out of every bucket instead of failing the
    whole scan.
    """
    try:
        end = record.expiry_date(context)
    except (DomainException, AttributeError) as e:
        logging.warning(
            f"Excluding malformed record from {context.value} buckets: {e}",
            extra={"record_id": getattr(record, "record_id", None), "context": context.value},
        )
        return None

    if end is None:
        return None
    return classify(end, today, context, rules)


def _classified(
    records: Iterable[Record],
    context: Context,
    today: date,
    rules: ExpiryRules,
) -> List[Tuple[Record, Classification]]:
    pairs = []
    for record in records:
        classification = classify_record(record, context, today, rules)
        if classification is not None:
            pairs.append((record, classification))
    return pairs


def _by_expiry(pairs: List[Tuple[Record, Classification]]) -> List[Record]:
    """Earliest expiry first"""
    return [record for record, _ in sorted(pairs, key=lambda p: p[1].days_remaining)]


def aggregate(
    records: Sequence[Record],
    context: Context,
    today: date,
    rules: ExpiryRules | None = None,
) -> Dict[UrgencyBucket, int]:
    """Count records per urgency bucket; every bucket is present"""
    if rules is None:
        rules = build_expiry_rules()
    counts = {bucket: 0 for bucket in UrgencyBucket}
    for _, classification in _classified(records, context, today, rules):
        counts[classification.bucket] += 1
    return counts


def filter_records(
    records: Sequence[Record],
    bucket: UrgencyBucket,
    context: Context,
    today: date,
    rules: ExpiryRules | None = None,
) -> List[Record]:
    """Records in one bucket, earliest expiry first"""
    if rules is None:
        rules = build_expiry_rules()
    matching = [
        (record, classification)
        for record, classification in _classified(records, context, today, rules)
        if classification.bucket == bucket
    ]
    return _by_expiry(matching)


def filter_expiring_soon(
    records: Sequence[Record],
    context: Context,
    today: date,
    rules: ExpiryRules | None = None,
) -> List[Record]:
    """Records in the context's "expiring soon" buckets, earliest expiry first"""
    if rules is None:
        rules = build_expiry_rules()
    soon = rules[context].expiring_soon
    matching = [
        (record, classification)
        for record, classification in _classified(records, context, today, rules)
        if classification.bucket in soon
    ]
    return _by_expiry(matching)


def filter_pending_payment(records: Sequence[Record]) -> List[Record]:
    """Records with an outstanding balance; independent of expiry"""
    pending = []
    for record in records:
        payment = getattr(record, "payment", None)
        if payment is not None and payment.is_pending:
            pending.append(record)
    return pending


def _part_a_status(record: NationalPermit, today: date, rules: ExpiryRules) -> Optional[RecordStatus]:
    classification = classify_record(record, Context.PART_A, today, rules)
    if classification is None:
        return None
    return status_for(classification, Context.PART_A, rules)


TilePredicate = Callable[[NationalPermit, date, ExpiryRules], bool]


def _expiring(context: Context) -> TilePredicate:
    def predicate(record: NationalPermit, today: date, rules: ExpiryRules) -> bool:
        classification = classify_record(record, context, today, rules)
        return classification is not None and classification.bucket in rules[context].expiring_soon

    return predicate


_TILE_PREDICATES: Dict[DashboardTile, TilePredicate] = {
    DashboardTile.TOTAL: lambda record, today, rules: True,
    DashboardTile.ACTIVE: lambda record, today, rules: _part_a_status(record, today, rules) == RecordStatus.ACTIVE,
    DashboardTile.PART_A_EXPIRING: _expiring(Context.PART_A),
    DashboardTile.PART_B_EXPIRING: _expiring(Context.PART_B),
    DashboardTile.PENDING_PAYMENT: lambda record, today, rules: bool(filter_pending_payment([record])),
}

_TILE_SORT_CONTEXT = {
    DashboardTile.PART_A_EXPIRING: Context.PART_A,
    DashboardTile.PART_B_EXPIRING: Context.PART_B,
}


def filter_tile(
    permits: Sequence[NationalPermit],
    tile: DashboardTile,
    today: date,
    rules: ExpiryRules | None = None,
) -> List[NationalPermit]:
    """List behind a dashboard tile; expiring tiles are sorted earliest first"""
    if rules is None:
        rules = build_expiry_rules()
    predicate = _TILE_PREDICATES[tile]
    matching = [permit for permit in permits if predicate(permit, today, rules)]

    context = _TILE_SORT_CONTEXT.get(tile)
    if context is not None:
        return _by_expiry(_classified(matching, context, today, rules))
    return matching


def dashboard_tiles(
    permits: Sequence[NationalPermit],
    today: date,
    rules: ExpiryRules | None = None,
) -> Dict[DashboardTile, int]:
    """Tile counts, each equal to the length of its filter_tile list"""
    if rules is None:
        rules = build_expiry_rules()
    return {tile: len(filter_tile(permits, tile, today, rules)) for tile in DashboardTile}
