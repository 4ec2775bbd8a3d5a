"""Record types for the four tables stacked in the configuration sheet.

Field names are the sheet's column names, so a recovered row maps onto a
record without renaming. Every field is a string and defaults to "" because
the sheet is hand-maintained and any cell may be missing.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class TableKind(str, Enum):
    """The four tables a header row can introduce."""

    PARTNER = "Partner_Master"
    CARD = "Card_UI_Config"
    PRODUCT_DETAIL = "Product_Detail_Config"
    DISPLAY_RULE = "Display_Rules"


class SheetRecord(BaseModel):
    """Base for recovered rows: immutable, unknown columns ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class Partner(SheetRecord):
    Partner_ID: str = ""
    Partner_Name: str = ""
    Bank_Code: str = ""
    Category: str = ""
    Status: str = ""


class CardPresentation(SheetRecord):
    Config_ID: str = ""
    Partner_ID: str = ""
    Card_Title: str = ""
    Card_Subtitle: str = ""
    Logo_URL: str = ""
    Badge_Text: str = ""
    Bg_Color: str = ""
    Text_Color: str = ""
    Benefit_1: str = ""
    Benefit_2: str = ""
    Benefit_3: str = ""
    CTA_Label_Card: str = ""


class ProductDetail(SheetRecord):
    Config_ID: str = ""
    Hero_Banner_URL: str = ""
    TnC_Content: str = ""
    Step_1_Desc: str = ""
    Step_2_Desc: str = ""
    CTA_Action_Type: str = ""
    Final_Target_URL: str = ""


class DisplayRule(SheetRecord):
    Rule_ID: str = ""
    Config_ID: str = ""
    User_Segment: str = ""
    Min_Age: str = ""
    Location: str = ""
    Priority: str = ""


RECORD_TYPES = {
    TableKind.PARTNER: Partner,
    TableKind.CARD: CardPresentation,
    TableKind.PRODUCT_DETAIL: ProductDetail,
    TableKind.DISPLAY_RULE: DisplayRule,
}


class ParsedTables(BaseModel):
    """One immutable snapshot of the four recovered tables, in sheet order."""

    model_config = ConfigDict(frozen=True)

    partners: Tuple[Partner, ...] = ()
    cards: Tuple[CardPresentation, ...] = ()
    product_details: Tuple[ProductDetail, ...] = ()
    display_rules: Tuple[DisplayRule, ...] = ()

    def counts(self) -> Dict[str, int]:
        return {
            "partners": len(self.partners),
            "cards": len(self.cards),
            "product_details": len(self.product_details),
            "display_rules": len(self.display_rules),
        }


class DenormalizedRow(CardPresentation):
    """A card joined with its partner and its first display rule."""

    Partner_Name: str = ""
    Status: str = ""
    Priority: str = ""
    User_Segment: str = ""


class CardPreview(BaseModel):
    """Everything the detail and steps preview screens need for one card."""

    model_config = ConfigDict(frozen=True)

    card: CardPresentation
    detail: Optional[ProductDetail] = None
    benefits: List[str] = []
    rules: List[DisplayRule] = []
