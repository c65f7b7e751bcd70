"""SoA Core - Statement of Affairs waterfall calculations and export."""

__version__ = "0.1.0"

from .models import CaseLedger, SoADocument, WaterfallResult
from .waterfall import WaterfallCalculator, compute
from .documents import empty_document, heal_document, seed_document
from .report import StatementOfAffairsReport

__all__ = [
    "CaseLedger",
    "SoADocument",
    "WaterfallResult",
    "WaterfallCalculator",
    "compute",
    "empty_document",
    "heal_document",
    "seed_document",
    "StatementOfAffairsReport",
]
