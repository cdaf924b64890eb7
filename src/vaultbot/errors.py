from __future__ import annotations


class BotError(Exception):
    """Base class for failures that are shown to the invoking user."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.user_message = message or self.default_message


class ValidationError(BotError):
    """Bad input shape or range. Raised before any state changes."""

    default_message = "Invalid input."


class SelfVouch(ValidationError):
    default_message = "You cannot vouch for yourself."


class InvalidTarget(ValidationError):
    default_message = "You cannot vouch for a bot."


class PermissionDenied(BotError):
    """The actor lacks the capability the command needs."""

    default_message = "You don't have permission to use this command."

    def __init__(self, message: str | None = None, missing_permissions: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing_permissions = missing_permissions or []


class NotActionable(BotError):
    """The target outranks the bot or is otherwise out of reach."""

    default_message = "I cannot act on this member. They may have a higher role than me."


class Conflict(BotError):
    default_message = "That already exists."


class KindMismatch(Conflict):
    """A sticky exists in the channel but belongs to the other removal command."""

    default_message = "This channel has a different kind of sticky message."


class NotFound(BotError):
    default_message = "Nothing to act on."


class TransientCollaboratorFailure(BotError):
    """A Discord API call failed."""

    default_message = "Discord rejected the request. Please try again later."


class PersistenceError(BotError):
    """Writing durable state failed; the in-memory change was rolled back."""

    default_message = "Could not save your change. Please try again later."
