"""Issue severity classification.

Severity reflects the RISK and IMPACT of an issue, not its status:
- keywords in the title/description decide the initial classification
- age may only ESCALATE severity, never reduce it
- resolved/closed issues keep the severity they had (historical accuracy)

Nothing here writes severity back; callers decide whether to persist a
suggested classification.
"""

from datetime import datetime
from typing import Optional

from tb_core_lib.models.common import utc_now, whole_days_between
from tb_core_lib.models.issue import IssueStatus, Severity

URGENT_KEYWORDS = [
    # Fire/smoke
    "fire", "smoke", "burning", "flames",
    # Gas
    "gas leak", "gas smell", "carbon monoxide",
    # Electrical
    "electrical fire", "sparking", "electrocution", "shock",
    # Flooding/major water
    "flood", "flooding", "burst pipe", "burst tap", "sewage",
    # Security emergencies
    "break-in", "intruder", "assault",
]

HIGH_KEYWORDS = [
    "burst", "leak", "leaking", "water damage", "water",
    "electrical", "power outage", "no power", "wiring", "outlet",
    "door", "lock", "broken lock", "window", "security",
    "toilet", "overflow", "blocked drain", "no hot water", "sewage smell",
    "mould", "mold", "asbestos", "pest", "rodent", "cockroach", "infestation",
    "ceiling collapse", "wall crack", "structural",
    "no heating", "no cooling", "heater broken", "ac broken",
]

MEDIUM_KEYWORDS = [
    "appliance", "dishwasher", "washing machine", "dryer", "fridge", "oven", "stove",
    "dripping", "tap", "faucet", "slow drain",
    "light", "switch", "bulb",
    "crack", "paint", "peeling", "stain",
    "handle", "hinge", "cabinet", "drawer",
    "fence", "gate", "garden", "gutter",
]

# Days unresolved after which a level escalates one step
ESCALATION_AFTER_DAYS = {
    Severity.HIGH: 14,
    Severity.MEDIUM: 21,
    Severity.LOW: 30,
}


def calculate_severity(title: str, description: Optional[str] = None) -> Severity:
    """
    Classify an issue from its text.

    The most severe keyword group with any match wins; text with no risk
    indicators is LOW.
    """
    text = f"{title} {description or ''}".lower()

    for keywords, severity in (
        (URGENT_KEYWORDS, Severity.URGENT),
        (HIGH_KEYWORDS, Severity.HIGH),
        (MEDIUM_KEYWORDS, Severity.MEDIUM),
    ):
        if any(keyword in text for keyword in keywords):
            return severity
    return Severity.LOW


def escalate_severity_by_age(current: Optional[Severity], days_old: int) -> Optional[Severity]:
    """
    Escalate one step once an issue has been open too long; never downgrade.

    An unclassified issue (``None``) is returned unchanged.
    """
    if current is None:
        return None
    current = Severity(current)
    threshold = ESCALATION_AFTER_DAYS.get(current)
    if threshold is None or days_old <= threshold:
        return current

    escalated = {
        Severity.HIGH: Severity.URGENT,
        Severity.MEDIUM: Severity.HIGH,
        Severity.LOW: Severity.MEDIUM,
    }
    return escalated[current]


def get_display_severity(
    stored: Optional[Severity],
    created_at: datetime,
    status: IssueStatus,
    now: Optional[datetime] = None,
) -> Optional[Severity]:
    """
    Severity to show for an issue.

    Resolved/closed issues show what they WERE; active issues may be shown
    escalated by age. Unclassified issues stay unclassified.
    """
    if stored is None:
        return None
    if not IssueStatus(status).is_active:
        return Severity(stored)
    days_old = whole_days_between(now or utc_now(), created_at)
    return escalate_severity_by_age(stored, days_old)


def is_valid_severity(value: str) -> bool:
    return value in {s.value for s in Severity}
