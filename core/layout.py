from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, replace
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from core.config import GRID_SIZE


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WidgetPosition:
    id: str
    x: int
    y: int
    w: int = 1
    h: int = 1


class LayoutState(Mapping[str, WidgetPosition]):
    """Read-only widget id -> position mapping; a new one is built per change."""

    def __init__(self, positions: Mapping[str, WidgetPosition]) -> None:
        self._positions = MappingProxyType(dict(positions))

    def __getitem__(self, widget_id: str) -> WidgetPosition:
        return self._positions[widget_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return f"LayoutState({dict(self._positions)!r})"

    def with_position(self, position: WidgetPosition) -> "LayoutState":
        updated = dict(self._positions)
        updated[position.id] = position
        return LayoutState(updated)

    def to_records(self) -> List[Dict[str, int]]:
        return [asdict(p) for p in self._positions.values()]


def snap_to_grid(value: float, grid_size: int = GRID_SIZE) -> int:
    # Half-grid offsets round up, negatives clamp to the origin.
    value = float(value)
    if not math.isfinite(value):
        return 0
    cells, remainder = divmod(value, grid_size)
    if 2 * remainder >= grid_size:
        cells += 1
    return max(0, int(cells) * grid_size)


LayoutListener = Callable[[LayoutState], None]


class WidgetLayoutManager:
    def __init__(self, defaults: Iterable[WidgetPosition], *, grid_size: int = GRID_SIZE) -> None:
        self._grid_size = grid_size
        self._state = LayoutState(
            {
                p.id: replace(p, x=snap_to_grid(p.x, grid_size), y=snap_to_grid(p.y, grid_size))
                for p in defaults
            }
        )
        self._edit_mode = False
        self._listeners: List[LayoutListener] = []

    @property
    def state(self) -> LayoutState:
        return self._state

    @property
    def edit_mode(self) -> bool:
        return self._edit_mode

    @property
    def grid_size(self) -> int:
        return self._grid_size

    def position(self, widget_id: str) -> Optional[WidgetPosition]:
        return self._state.get(widget_id)

    def subscribe(self, listener: LayoutListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def set_edit_mode(self, enabled: bool) -> LayoutState:
        enabled = bool(enabled)
        if self._edit_mode and not enabled:
            logger.info("layout saved: %s", self._state.to_records())
        self._edit_mode = enabled
        return self._state

    def move_widget(self, widget_id: str, proposed_x: float, proposed_y: float) -> LayoutState:
        if not self._edit_mode:
            return self._state
        current = self._state.get(widget_id)
        if current is None:
            return self._state

        x = snap_to_grid(proposed_x, self._grid_size)
        y = snap_to_grid(proposed_y, self._grid_size)
        if x == current.x and y == current.y:
            return self._state

        self._state = self._state.with_position(replace(current, x=x, y=y))
        logger.debug("widget %s moved to (%d, %d)", widget_id, x, y)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state
