"""
Expiry classification - the one place that turns an end date into urgency.

Every dashboard counter, expiring-soon list and renew button reads its
cutoffs from the rule table built here. Nothing else should compare
days-remaining against a literal.

Boundary table (days remaining, inclusive):

    Context            Expired  Critical  Warning  Attention  Valid   Expiring soon
    driving_licence    < 0      0-30      31-60    61-90      > 90    critical
    learning_licence   < 0      -         0-30     -          > 30    warning
    part_a             < 0      0-7       8-60     -          > 60    critical + warning
    part_b             < 0      0-7       8-30     -          > 30    critical + warning

The renew button has its own window (35 days, expired included) and is not
derived from any of the above.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, FrozenSet, NamedTuple, Optional

from rto_validity.config import Settings, settings
from rto_validity.domain.models import Context
from rto_validity.utils.date_utils import days_between


class UrgencyBucket(str, Enum):
    """Ordered from most to least urgent"""

    EXPIRED = "expired"
    CRITICAL = "critical"
    WARNING = "warning"
    ATTENTION = "attention"
    VALID = "valid"

    @property
    def rank(self) -> int:
        return list(UrgencyBucket).index(self)


class RecordStatus(str, Enum):
    """Three-state status shown next to each record"""

    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


@dataclass(frozen=True)
class ExpiryRule:
    """Upper bounds (inclusive) of each non-expired bucket for one context"""

    context: Context
    critical_max: Optional[int]
    warning_max: Optional[int]
    attention_max: Optional[int]
    expiring_soon: FrozenSet[UrgencyBucket]

    def bucket_for(self, days_remaining: int) -> UrgencyBucket:
        if days_remaining < 0:
            return UrgencyBucket.EXPIRED
        if self.critical_max is not None and days_remaining <= self.critical_max:
            return UrgencyBucket.CRITICAL
        if self.warning_max is not None and days_remaining <= self.warning_max:
            return UrgencyBucket.WARNING
        if self.attention_max is not None and days_remaining <= self.attention_max:
            return UrgencyBucket.ATTENTION
        return UrgencyBucket.VALID


class Classification(NamedTuple):
    days_remaining: int
    bucket: UrgencyBucket


ExpiryRules = Dict[Context, ExpiryRule]


def build_expiry_rules(config: Settings | None = None) -> ExpiryRules:
    """Build the boundary table from configuration"""
    config = config or settings
    soon = frozenset({UrgencyBucket.CRITICAL, UrgencyBucket.WARNING})

    return {
        Context.DRIVING_LICENCE: ExpiryRule(
            context=Context.DRIVING_LICENCE,
            critical_max=config.licence_critical_days,
            warning_max=config.licence_warning_days,
            attention_max=config.licence_attention_days,
            expiring_soon=frozenset({UrgencyBucket.CRITICAL}),
        ),
        Context.LEARNING_LICENCE: ExpiryRule(
            context=Context.LEARNING_LICENCE,
            critical_max=None,
            warning_max=config.learning_licence_expiring_soon_days,
            attention_max=None,
            expiring_soon=frozenset({UrgencyBucket.WARNING}),
        ),
        Context.PART_A: ExpiryRule(
            context=Context.PART_A,
            critical_max=config.urgent_days,
            warning_max=config.part_a_expiring_soon_days,
            attention_max=None,
            expiring_soon=soon,
        ),
        Context.PART_B: ExpiryRule(
            context=Context.PART_B,
            critical_max=config.urgent_days,
            warning_max=config.part_b_expiring_soon_days,
            attention_max=None,
            expiring_soon=soon,
        ),
    }


def days_remaining(end: date, today: date) -> int:
    """Signed days until end; 0 on the last valid day, negative once past"""
    return days_between(today, end)


def classify(
    end: date,
    today: date,
    context: Context,
    rules: ExpiryRules | None = None,
) -> Classification:
    if rules is None:
        rules = build_expiry_rules()
    remaining = days_remaining(end, today)
    return Classification(days_remaining=remaining, bucket=rules[context].bucket_for(remaining))


def is_expiring_soon(classification: Classification, context: Context, rules: ExpiryRules | None = None) -> bool:
    if rules is None:
        rules = build_expiry_rules()
    return classification.bucket in rules[context].expiring_soon


def status_for(classification: Classification, context: Context, rules: ExpiryRules | None = None) -> RecordStatus:
    if classification.bucket == UrgencyBucket.EXPIRED:
        return RecordStatus.EXPIRED
    if is_expiring_soon(classification, context, rules):
        return RecordStatus.EXPIRING_SOON
    return RecordStatus.ACTIVE


def is_renewal_due(end: date, today: date, window_days: int | None = None) -> bool:
    """Renew button visibility: shown within the renew window, expired parts included"""
    window_days = settings.renew_window_days if window_days is None else window_days
    return days_remaining(end, today) <= window_days
