from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

from ..errors import InvalidTarget, NotFound, PersistenceError, SelfVouch, ValidationError

log = logging.getLogger("vaultbot.vouches")

UpsertResult = Literal["created", "updated"]


@dataclass(frozen=True)
class Vouch:
    voucher_id: int
    voucher_tag: str
    target_id: int
    rating: int
    comment: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "voucherId": str(self.voucher_id),
            "voucherTag": self.voucher_tag,
            "targetId": str(self.target_id),
            "rating": self.rating,
            "comment": self.comment,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Vouch":
        ts = datetime.fromisoformat(str(data["timestamp"]).replace("Z", "+00:00"))
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return cls(
            voucher_id=int(data["voucherId"]),
            voucher_tag=str(data.get("voucherTag", "")),
            target_id=int(data["targetId"]),
            rating=int(data["rating"]),
            comment=str(data.get("comment", "")),
            timestamp=ts,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VouchLedger:
    """Vouches per target user, mirrored to a JSON file after every change.

    A voucher holds at most one vouch per target; vouching again replaces the
    earlier entry. Targets with no vouches left are dropped from the file.
    """

    def __init__(self, path: str, clock: Callable[[], datetime] = _utcnow) -> None:
        self._path = path
        self._clock = clock
        self._vouches: dict[int, list[Vouch]] = {}

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> int:
        """Replace in-memory state with the file contents. Returns the vouch count."""
        self._vouches = {}
        if not os.path.exists(self._path):
            log.info("No vouch file at %s, starting empty", self._path)
            return 0
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
            loaded: dict[int, list[Vouch]] = {}
            for target_id, entries in raw.items():
                vouches = [Vouch.from_dict(e) for e in entries]
                if vouches:
                    loaded[int(target_id)] = vouches
        except (OSError, ValueError, KeyError, TypeError):
            log.exception("Failed to load vouches from %s; starting empty", self._path)
            return 0
        self._vouches = loaded
        count = sum(len(v) for v in loaded.values())
        log.info("Loaded %d vouches for %d users", count, len(loaded))
        return count

    def save(self) -> None:
        data = {
            str(target_id): [v.to_dict() for v in vouches]
            for target_id, vouches in self._vouches.items()
        }
        tmp = self._path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, self._path)

    def _commit(self, target_id: int, previous: list[Vouch] | None) -> None:
        try:
            self.save()
        except OSError as e:
            if previous is None:
                self._vouches.pop(target_id, None)
            else:
                self._vouches[target_id] = previous
            log.error("Failed to save vouches to %s: %s", self._path, e)
            raise PersistenceError() from e

    def upsert(
        self,
        voucher_id: int,
        voucher_tag: str,
        target_id: int,
        rating: int,
        comment: str,
        *,
        target_is_bot: bool = False,
    ) -> UpsertResult:
        voucher_id, target_id = int(voucher_id), int(target_id)
        if voucher_id == target_id:
            raise SelfVouch()
        if target_is_bot:
            raise InvalidTarget()
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be a whole number from 1 to 5.")

        vouch = Vouch(
            voucher_id=voucher_id,
            voucher_tag=voucher_tag,
            target_id=target_id,
            rating=rating,
            comment=comment,
            timestamp=self._clock(),
        )
        previous = self._vouches.get(target_id)
        entries = list(previous or [])
        result: UpsertResult = "created"
        for i, existing in enumerate(entries):
            if existing.voucher_id == voucher_id:
                entries[i] = vouch
                result = "updated"
                break
        else:
            entries.append(vouch)

        self._vouches[target_id] = entries
        self._commit(target_id, previous)
        log.info("Vouch %s: %s -> %s (%d stars)", result, voucher_id, target_id, rating)
        return result

    def remove(self, voucher_id: int, target_id: int) -> Vouch:
        voucher_id, target_id = int(voucher_id), int(target_id)
        previous = self._vouches.get(target_id)
        match = next((v for v in previous or [] if v.voucher_id == voucher_id), None)
        if match is None:
            raise NotFound("You haven't vouched for this user.")

        remaining = [v for v in previous if v.voucher_id != voucher_id]
        if remaining:
            self._vouches[target_id] = remaining
        else:
            del self._vouches[target_id]
        self._commit(target_id, previous)
        log.info("Vouch removed: %s -> %s", voucher_id, target_id)
        return match

    def list(self, target_id: int) -> list[Vouch]:
        """Vouches for ``target_id``, newest first."""
        entries = self._vouches.get(int(target_id), [])
        ordered = sorted(enumerate(entries), key=lambda p: (p[1].timestamp, p[0]), reverse=True)
        return [v for _, v in ordered]

    def average_rating(self, target_id: int) -> float:
        entries = self._vouches.get(int(target_id), [])
        if not entries:
            return 0.0
        return sum(v.rating for v in entries) / len(entries)
