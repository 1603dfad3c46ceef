"""
Row classifiers and keyword catalogs for concierge sheets.

Small predicates over the first cell of a row decide what the row is (section
header, metric row, date marker, no-calls marker) and lookups map free text to
a catalog entry (metric type, agent, issue category, urgency). All functions
are pure.
"""

from typing import Dict, Iterable, List, Optional, Pattern, Tuple
import re

from concierge_ingest.models import IssueUrgency, MetricType
from concierge_ingest.services.parsers import (
    DAILY_DOT_DATE_PATTERN,
    DAILY_SLASH_DATE_PATTERN,
    parse_weekly_date_range,
)


# =============================================================================
# CONSTANTS - Catalogs
# =============================================================================

NO_CALLS_LABELS: Tuple[str, ...] = ('no calls', 'no call')

NO_CALLS_MEMBER_NAME: str = 'NO CALLS'

# First matching category wins, so order matters: 'lab bill' before 'billing'
ISSUE_KEYWORDS: Dict[str, List[str]] = {
    'telemedicine': ['telemedicine', 'telemedecine', 'telehealth'],
    'medication': ['medication', 'medicine', 'drug'],
    'rx assistance': ['rx assistance', 'rx assisance', 'prescription help'],
    'rx update': ['rx update', 'prescription update'],
    'price increase question': ['price increase', 'cost increase'],
    'plan questions': ['plan question', 'plan info'],
    'renewal question': ['renewal', 'renew'],
    'cancelling': ['cancel', 'cancelling', 'cancellation'],
    'app login issues': ['app login', 'login issue', 'cant login', 'cannot login'],
    'health wallet': ['health wallet', 'healthwallet', 'hw'],
    'card': ['card', 'id card', 'member card'],
    'provider look ups': ['provider lookup', 'provider look up', 'find provider'],
    'sharing request': ['sharing request', 'share request'],
    'preventive': ['preventive', 'prevention'],
    'lab bill': ['lab bill', 'lab billing'],
    'billing': ['billing', 'bill', 'invoice'],
    'er visit': ['er visit', 'emergency room', 'er vist'],
    'genetic testing': ['genetic test', 'dna test'],
    'fullscripts': ['fullscripts', 'full scripts'],
    'bill submission': ['bill submission', 'submit bill', 'bill sumbition'],
    'mental health': ['mental health', 'therapy', 'counseling'],
    'zion issues': ['zion issue', 'zion'],
    'phcs': ['phcs'],
}

OTHER_CATEGORY: str = 'other'

HIGH_URGENCY_KEYWORDS: List[str] = [
    'cancel', 'er', 'emergency', 'urgent', 'critical', 'down', 'not working',
]

LOW_URGENCY_KEYWORDS: List[str] = ['card', 'id card', 'lookup', 'look up', 'question']

# Keywords this short only match as whole words ('er' must not hit 'member')
SHORT_KEYWORD_LENGTH: int = 3

AGENT_CELL_SUFFIX_PATTERN: Pattern[str] = re.compile(r'\s*\([^)]*\)$')

MEMBER_NAME_SUFFIX_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r'\s*x\s*\d+\s*$', re.IGNORECASE),
    re.compile(r'\s*\([^)]*\)\s*$'),
    re.compile(r'\s*-\s*Zoho\s*CRM\s*$', re.IGNORECASE),
)


def _keyword_pattern(keyword: str) -> Pattern[str]:
    escaped = re.escape(keyword)
    if len(keyword) <= SHORT_KEYWORD_LENGTH:
        return re.compile(rf'\b{escaped}\b')
    return re.compile(rf'\b{escaped}')


_ISSUE_PATTERNS: List[Tuple[str, List[Pattern[str]]]] = [
    (category, [_keyword_pattern(k) for k in keywords])
    for category, keywords in ISSUE_KEYWORDS.items()
]
_HIGH_URGENCY_PATTERNS = [_keyword_pattern(k) for k in HIGH_URGENCY_KEYWORDS]
_LOW_URGENCY_PATTERNS = [_keyword_pattern(k) for k in LOW_URGENCY_KEYWORDS]


def _normalize_label(text: str) -> str:
    value = re.sub(r'\s+', ' ', (text or '').lower()).strip()
    return re.sub(r'\s*/\s*', '/', value)


# =============================================================================
# Weekly
# =============================================================================

def is_date_range_row(first_cell: str) -> bool:
    """True iff the cell carries a parseable weekly date range."""
    return parse_weekly_date_range(first_cell) is not None


def match_metric_type(first_cell: str) -> Optional[MetricType]:
    """
    Catalog entry whose label appears in the cell, case-insensitively.

    When several labels appear the longest one wins, so a cell reading
    'Incomplete/Next Week CRM Tasks' is never taken for 'CRM Tasks'.
    """
    normalized = _normalize_label(first_cell)
    if not normalized:
        return None

    best: Optional[MetricType] = None
    for metric in MetricType:
        label = _normalize_label(metric.value)
        if label in normalized and (best is None or len(label) > len(best.value)):
            best = metric
    return best


def is_metric_row(first_cell: str) -> bool:
    return match_metric_type(first_cell) is not None


def match_agent_name(cell: str, known_agents: Iterable[str]) -> Optional[str]:
    """
    Canonical agent name a header cell holds, or None.

    The whole cell must be the name, case-insensitively, once a trailing
    parenthetical is removed: 'ACE (lead)' maps to 'Ace' but free text that
    merely mentions an agent ('Adam out sick', 'replaced headset') does not.
    """
    normalized = AGENT_CELL_SUFFIX_PATTERN.sub('', (cell or '').strip()).strip().lower()
    if not normalized:
        return None

    for agent in known_agents:
        if agent and agent.strip().lower() == normalized:
            return agent
    return None


def is_placeholder_value(value: str) -> bool:
    """Empty, 'N/A' (any case) or '?' cells carry no metric value."""
    normalized = (value or '').strip()
    return normalized == '' or normalized == '?' or normalized.lower() == 'n/a'


# =============================================================================
# Daily
# =============================================================================

def is_date_row(first_cell: str) -> bool:
    """True for a bare daily date marker ('12.5.24' or '12/5/2024')."""
    value = (first_cell or '').strip()
    return bool(
        DAILY_DOT_DATE_PATTERN.match(value) or DAILY_SLASH_DATE_PATTERN.match(value)
    )


def is_no_calls_row(first_cell: str) -> bool:
    return (first_cell or '').strip().lower() in NO_CALLS_LABELS


def clean_member_name(raw: str) -> str:
    """
    Strip phone extensions, trailing parentheticals and CRM-system suffixes.

    Example:
        >>> clean_member_name('John Smith x102')
        'John Smith'
        >>> clean_member_name('Mary Jones (new) - Zoho CRM')
        'Mary Jones'
    """
    cleaned = (raw or '').strip()
    while True:
        previous = cleaned
        for pattern in MEMBER_NAME_SUFFIX_PATTERNS:
            cleaned = pattern.sub('', cleaned)
        cleaned = cleaned.strip()
        if cleaned == previous:
            return cleaned


def categorize_issue(issue_description: str) -> str:
    """First ISSUE_KEYWORDS category matching the description, else 'other'."""
    normalized = (issue_description or '').strip().lower()
    if not normalized:
        return OTHER_CATEGORY

    for category, patterns in _ISSUE_PATTERNS:
        if any(p.search(normalized) for p in patterns):
            return category
    return OTHER_CATEGORY


def detect_issue_urgency(issue_description: str) -> IssueUrgency:
    normalized = (issue_description or '').lower()
    if not normalized:
        return IssueUrgency.MEDIUM
    if any(p.search(normalized) for p in _HIGH_URGENCY_PATTERNS):
        return IssueUrgency.HIGH
    if any(p.search(normalized) for p in _LOW_URGENCY_PATTERNS):
        return IssueUrgency.LOW
    return IssueUrgency.MEDIUM


__all__ = [
    'NO_CALLS_MEMBER_NAME',
    'ISSUE_KEYWORDS',
    'OTHER_CATEGORY',
    'is_date_range_row',
    'match_metric_type',
    'is_metric_row',
    'match_agent_name',
    'is_placeholder_value',
    'is_date_row',
    'is_no_calls_row',
    'clean_member_name',
    'categorize_issue',
    'detect_issue_urgency',
]
