"""Resolution engine for card configurations.

This module joins the recovered tables and decides which cards a viewer
segment sees and in what order. Everything here is a pure function of a
ParsedTables snapshot; nothing raises for missing or malformed data.

Join policy: whenever a lookup can match several rows (duplicate partner ids,
several rules or product details for one card), the first match in original
sheet order wins.
"""

import re
from typing import Iterable, List, Optional, Sequence, TypeVar

from src.tables.models import (
    CardPresentation,
    CardPreview,
    DenormalizedRow,
    DisplayRule,
    ParsedTables,
    Partner,
    ProductDetail,
)

# Segment names
SEGMENT_ALL = "All"
SEGMENT_NEW_USER = "New User"
SEGMENT_EXISTING_USER = "Existing User"

DEFAULT_SEGMENTS = [SEGMENT_ALL, SEGMENT_NEW_USER, SEGMENT_EXISTING_USER]

# Fallbacks for the administrative view
UNKNOWN_PARTNER_NAME = "Unknown"
UNKNOWN_PARTNER_STATUS = "INACTIVE"
DEFAULT_PRIORITY = "0"

ACTIVE_STATUS = "active"

# Leading integer, the way spreadsheet users write "10" or "10 (high)"
PRIORITY_PATTERN = re.compile(r"^\s*([+-]?\d+)", re.ASCII)

T = TypeVar("T")


def first_match(items: Iterable[T], **criteria: str) -> Optional[T]:
    """Return the first item whose attributes equal all criteria, else None."""
    for item in items:
        if all(getattr(item, field) == value for field, value in criteria.items()):
            return item
    return None


def parse_priority(raw: Optional[str]) -> int:
    """Parse a priority cell, returning 0 when absent or unparseable."""
    if not raw:
        return 0
    match = PRIORITY_PATTERN.match(raw)
    if not match:
        return 0
    return int(match.group(1))


def is_active_status(status: Optional[str]) -> bool:
    """Case-insensitive check for an active partner status."""
    return (status or "").strip().lower() == ACTIVE_STATUS


def rules_for(tables: ParsedTables, config_id: str) -> List[DisplayRule]:
    return [rule for rule in tables.display_rules if rule.Config_ID == config_id]


def find_partner(tables: ParsedTables, partner_id: str) -> Optional[Partner]:
    return first_match(tables.partners, Partner_ID=partner_id)


def find_card(tables: ParsedTables, config_id: str) -> Optional[CardPresentation]:
    return first_match(tables.cards, Config_ID=config_id)


def product_detail_for(tables: ParsedTables, config_id: str) -> Optional[ProductDetail]:
    """First product detail for a card. Extra rows with the same id are ignored."""
    return first_match(tables.product_details, Config_ID=config_id)


def card_benefits(card: CardPresentation) -> List[str]:
    """Non-empty benefits of a card, in column order."""
    return [b for b in (card.Benefit_1, card.Benefit_2, card.Benefit_3) if b]


def administrative_view(tables: ParsedTables) -> List[DenormalizedRow]:
    """One row per card with partner and first-rule columns joined in.

    This is a left join: cards are never filtered out. Missing or empty join
    values fall back to "Unknown", "INACTIVE", "0" and "All".
    """
    rows = []
    for card in tables.cards:
        partner = find_partner(tables, card.Partner_ID)
        rule = first_match(tables.display_rules, Config_ID=card.Config_ID)
        rows.append(DenormalizedRow(
            **card.model_dump(),
            Partner_Name=(partner.Partner_Name if partner else "") or UNKNOWN_PARTNER_NAME,
            Status=(partner.Status if partner else "") or UNKNOWN_PARTNER_STATUS,
            Priority=(rule.Priority if rule else "") or DEFAULT_PRIORITY,
            User_Segment=(rule.User_Segment if rule else "") or SEGMENT_ALL,
        ))
    return rows


def check_card_eligibility(rules: Sequence[DisplayRule], segment: str) -> bool:
    """Check a card's display rules against a viewer segment.

    A card without rules is shown to everyone. Otherwise at least one rule
    must target "All" or exactly the requested segment. Segment matching is
    case-sensitive, unlike the partner status check.
    """
    if not rules:
        return True
    return any(rule.User_Segment in (SEGMENT_ALL, segment) for rule in rules)


def card_priority(tables: ParsedTables, config_id: str) -> int:
    """Priority of a card, taken from its first display rule."""
    rule = first_match(tables.display_rules, Config_ID=config_id)
    return parse_priority(rule.Priority if rule else None)


def eligible_cards(tables: ParsedTables, segment: str) -> List[CardPresentation]:
    """Cards visible to a segment, highest priority first.

    Steps:
    1. Keep cards whose partner is active
    2. Keep cards whose display rules admit the segment
    3. Stable sort by priority, descending; ties keep sheet order
    """
    active_partners = {
        partner.Partner_ID for partner in tables.partners
        if is_active_status(partner.Status)
    }

    cards = [card for card in tables.cards if card.Partner_ID in active_partners]
    cards = [
        card for card in cards
        if check_card_eligibility(rules_for(tables, card.Config_ID), segment)
    ]

    # sorted() is stable, so equal priorities keep their original order
    return sorted(cards, key=lambda card: card_priority(tables, card.Config_ID), reverse=True)


def card_preview(tables: ParsedTables, config_id: str) -> Optional[CardPreview]:
    """Card, product detail, benefits and rules for the preview screens."""
    card = find_card(tables, config_id)
    if card is None:
        return None
    return CardPreview(
        card=card,
        detail=product_detail_for(tables, config_id),
        benefits=card_benefits(card),
        rules=rules_for(tables, config_id),
    )


def known_segments(tables: ParsedTables) -> List[str]:
    """Default segments followed by any other segment named in the rules."""
    segments = list(DEFAULT_SEGMENTS)
    for rule in tables.display_rules:
        if rule.User_Segment and rule.User_Segment not in segments:
            segments.append(rule.User_Segment)
    return segments
