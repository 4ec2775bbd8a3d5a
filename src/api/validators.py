"""Input validation utilities for CardSheet API.

Segments are matched case-sensitively by the engine, so validation only
rejects values that can never match a rule. It never normalizes case.
"""

from typing import Optional, Tuple

MAX_CONFIG_ID_LENGTH = 128

MAX_SEGMENT_LENGTH = 100


def validate_segment(segment: Optional[str]) -> Tuple[bool, str, str]:
    """Validate the segment query parameter.

    Args:
        segment: Segment name to validate

    Returns:
        Tuple of (is_valid, error_message, segment); defaults to "All"
    """
    if segment is None:
        return True, "", "All"

    if not isinstance(segment, str):
        return False, "segment must be a string", ""

    if not segment.strip():
        return False, "segment must not be blank", ""

    if len(segment) > MAX_SEGMENT_LENGTH:
        return False, f"segment must be at most {MAX_SEGMENT_LENGTH} characters", ""

    return True, "", segment


def validate_config_id(config_id: str) -> Tuple[bool, str]:
    """Validate config_id format.

    Args:
        config_id: Config ID to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not config_id:
        return False, "config_id is required"

    if not isinstance(config_id, str):
        return False, "config_id must be a string"

    if not config_id.strip():
        return False, "config_id must not be blank"

    if len(config_id) > MAX_CONFIG_ID_LENGTH:
        return False, f"config_id must be at most {MAX_CONFIG_ID_LENGTH} characters"

    return True, ""
