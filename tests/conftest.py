"""Pytest configuration for CardSheet tests.

This file adds the project root to sys.path so that imports like
`from src.ingest import grid_parser` work correctly.
"""

import sys
from pathlib import Path
import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.ingest.grid_parser import parse_sheet_text
from tests.sheet_samples import FULL_SHEET_CSV


@pytest.fixture
def sample_sheet_csv():
    """Fixture providing the two-table sample sheet (no rules)."""
    return (
        "Partner_ID,Partner_Name,Bank_Code,Category,Status\n"
        "P1,Acme Bank,ACM,Card,Active\n"
        "\n"
        "Config_ID,Partner_ID,Card_Title,Card_Subtitle,Logo_URL,Badge_Text,Bg_Color,Text_Color,"
        "Benefit_1,Benefit_2,Benefit_3,CTA_Label_Card\n"
        "C1,P1,Acme Gold,Cashback 5%,,,,,Free shipping,,,Open now\n"
    )


@pytest.fixture
def full_sheet_csv():
    """Fixture providing a sheet with all four tables."""
    return FULL_SHEET_CSV


@pytest.fixture
def full_tables():
    """Fixture providing the recovered tables of the full sheet."""
    return parse_sheet_text(FULL_SHEET_CSV)
