"""
Services

State owned by the bot: sticky anchors, the temp-ban schedule and the vouch ledger.
"""

from .sticky import StickyAnchor, StickyAnchorController, StickyContent, StickyKind
from .tempbans import TempBan, TempBanSchedule
from .tempban_store import TempBanStore
from .vouch_ledger import Vouch, VouchLedger

__all__ = [
    "StickyAnchor",
    "StickyAnchorController",
    "StickyContent",
    "StickyKind",
    "TempBan",
    "TempBanSchedule",
    "TempBanStore",
    "Vouch",
    "VouchLedger",
]
