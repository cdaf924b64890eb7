from __future__ import annotations

from dataclasses import dataclass
from typing import Final

# Discord limits
MAX_EMBED_DESCRIPTION: Final[int] = 4096
MAX_EMBED_TITLE: Final[int] = 256
MAX_FIELD_NAME: Final[int] = 256
MAX_FIELD_VALUE: Final[int] = 1024
MAX_FIELDS_PER_EMBED: Final[int] = 25

# Discord refuses timeouts longer than 28 days
MAX_TIMEOUT_MS: Final[int] = 28 * 24 * 60 * 60 * 1000

# Timed bans are capped at ten years; use a permanent ban beyond that
MAX_TEMPBAN_MS: Final[int] = 3650 * 24 * 60 * 60 * 1000

ROBUX_TAX_KEEP_RATE: Final[float] = 0.7

DEFAULT_REASON: Final[str] = "No reason provided"
PERMANENT_DURATIONS: Final[frozenset[str]] = frozenset({"permanent", "perm", "forever"})

VOUCHES_PAGE_SIZE: Final[int] = 10

# Colors (hex values)
COLORS = {
    "default": 0x5865F2,
    "error": 0xED4245,
    "ban": 0xFF0000,
    "kick": 0xFFA500,
    "mute": 0xFFFF00,
    "unban": 0x2ECC71,
    "unmute": 0x2ECC71,
    "vouch": 0xF1C40F,
}


@dataclass(frozen=True)
class OrderStatus:
    value: str
    emoji: str
    title: str
    description: str
    color: int


ORDER_STATUSES: dict[str, OrderStatus] = {
    s.value: s
    for s in (
        OrderStatus("finding_product", "🔍", "Finding Product", "We are trying to find the requested item", 0x3498DB),
        OrderStatus("on_hold", "⏸️", "On Hold", "Your order has been put on hold.", 0xF39C12),
        OrderStatus("pending_payment", "💳", "Pending Payment", "Waiting for client to pay.", 0xE67E22),
        OrderStatus(
            "transaction_in_progress",
            "⚙️",
            "Transaction in Progress",
            "We received your payment and is waiting for client to be online.",
            0x9B59B6,
        ),
        OrderStatus("success", "✅", "Success", "Thanks for shopping at VaultX", 0x2ECC71),
        OrderStatus("declined", "❌", "Declined", "Sorry we can't grant the requested item", 0xE74C3C),
    )
}

UNKNOWN_STATUS = OrderStatus("unknown", "📦", "Unknown Status", "Status information unavailable", 0x95A5A6)

# Error messages
ERROR_MESSAGES = {
    "missing_permissions": "You don't have permission to use this command.",
    "bot_missing_permissions": "I lack the permissions required to run this command.",
    "guild_only": "This command can only be used in a server.",
    "member_not_found": "Member not found.",
    "unexpected": "An error occurred.",
}
