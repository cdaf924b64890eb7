"""VaultBot: moderation, sticky messages and vouch tracking for a Discord shop."""

__version__ = "1.0.0"
