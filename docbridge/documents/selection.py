"""Documents marked for inclusion in the next AI request."""

from collections.abc import Iterable


class SelectionTracker:
    """Set of selected document ids.

    Ids are not checked against the registry; dangling ids survive until the
    registry reconciles them on deletion.
    """

    def __init__(self) -> None:
        self._selected: frozenset[str] = frozenset()

    @property
    def selected(self) -> frozenset[str]:
        return self._selected

    def set_selection(self, ids: Iterable[str]) -> None:
        self._selected = frozenset(ids)

    def discard(self, ids: Iterable[str]) -> None:
        self._selected = self._selected - frozenset(ids)

    def clear(self) -> None:
        self._selected = frozenset()
