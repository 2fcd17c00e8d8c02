from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List

from ..core.enums import Transition

_PAST_TENSE = {
    Transition.APPROVE: "Approved",
    Transition.REJECT: "Rejected",
    Transition.ACTIVATE: "Activated",
    Transition.DEACTIVATE: "Deactivated",
}


@dataclass(frozen=True)
class ItemFailure:
    uid: str
    reason: str
    message: str


@dataclass(frozen=True)
class BulkResult:
    transition: Transition
    success: int
    failed: int
    failures: List[ItemFailure] = field(default_factory=list)

    @property
    def failed_ids(self) -> List[str]:
        return [f.uid for f in self.failures]

    def summary(self) -> str:
        if self.failed > 0:
            return f"{self.success} succeeded, {self.failed} failed"
        return f"{_PAST_TENSE[self.transition]} {self.success} user(s)"

    def to_dict(self) -> dict:
        return {
            "transition": self.transition.value,
            "success": self.success,
            "failed": self.failed,
            "failures": [{"uid": f.uid, "reason": f.reason, "message": f.message} for f in self.failures],
            "message": self.summary(),
        }


class Selection:
    """Checked identifiers of one list view, in the order they were checked."""

    def __init__(self, uids: Iterable[str] = ()):
        self._uids: dict[str, None] = dict.fromkeys(uids)

    def __contains__(self, uid: object) -> bool:
        return uid in self._uids

    def __iter__(self) -> Iterator[str]:
        return iter(self._uids)

    def __len__(self) -> int:
        return len(self._uids)

    def toggle(self, uid: str) -> None:
        if uid in self._uids:
            del self._uids[uid]
        else:
            self._uids[uid] = None

    def toggle_all(self, visible_uids: Iterable[str]) -> None:
        """Select every visible row, or clear when all of them are already selected."""
        visible = list(dict.fromkeys(visible_uids))
        if len(self._uids) == len(visible) and all(uid in self._uids for uid in visible):
            self.clear()
        else:
            self._uids = dict.fromkeys(visible)

    def clear(self) -> None:
        self._uids = {}

    def ids(self) -> List[str]:
        return list(self._uids)
