"""Drill-down navigation state for the dashboard charts.

Two independent dimensions (category, region) each sit either at the
overview or one level drilled in. The navigator keeps the ordered drill
path, answers which data slice a chart should show, and notifies listeners
with the new immutable path after every change.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.config import DRILL_PALETTE


logger = logging.getLogger(__name__)


class Dimension(str, Enum):
    CATEGORY = "category"
    REGION = "region"


@dataclass(frozen=True)
class DrillLevel:
    dimension: Dimension
    value: str


@dataclass(frozen=True)
class DrillPath:
    levels: Tuple[DrillLevel, ...] = ()

    def __len__(self) -> int:
        return len(self.levels)

    def __iter__(self):
        return iter(self.levels)

    def for_dimension(self, dimension: Dimension) -> Optional[DrillLevel]:
        for level in self.levels:
            if level.dimension == dimension:
                return level
        return None

    def to_records(self) -> List[Dict[str, str]]:
        return [{"dimension": level.dimension.value, "value": level.value} for level in self.levels]


@dataclass(frozen=True)
class ChildRecord:
    label: str
    value: float


@dataclass(frozen=True)
class DisplayRecord:
    label: str
    value: float
    color: Optional[str] = None


@dataclass(frozen=True)
class DimensionDataset:
    top_level: Tuple[DisplayRecord, ...]
    children: Mapping[str, Tuple[ChildRecord, ...]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        top_level: Iterable[DisplayRecord],
        children: Mapping[str, Iterable[ChildRecord]],
    ) -> "DimensionDataset":
        frozen_children = {str(k): tuple(v) for k, v in children.items()}
        return cls(top_level=tuple(top_level), children=MappingProxyType(frozen_children))


PathListener = Callable[[DrillPath], None]


def as_dimension(value: Any) -> Optional[Dimension]:
    if isinstance(value, Dimension):
        return value
    try:
        return Dimension(str(value).strip().lower())
    except ValueError:
        return None


class DrillDownNavigator:
    def __init__(
        self,
        datasets: Mapping[Dimension, DimensionDataset],
        *,
        palette: Sequence[str] = DRILL_PALETTE,
    ) -> None:
        self._datasets = dict(datasets)
        self._palette = tuple(palette)
        self._path = DrillPath()
        self._listeners: List[PathListener] = []

    @property
    def path(self) -> DrillPath:
        return self._path

    def subscribe(self, listener: PathListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _commit(self, path: DrillPath) -> DrillPath:
        if path == self._path:
            return self._path
        self._path = path
        logger.debug("drill path -> %s", path.to_records())
        for listener in list(self._listeners):
            listener(path)
        return path

    def drill_into(self, dimension: Dimension, value: str) -> DrillPath:
        """Append a drill level for ``dimension``.

        Already-drilled dimensions and empty values leave the path as is.
        The value is not checked against the child dataset; an unknown
        value is kept in the path and resolves to no data.
        """
        dim = as_dimension(dimension)
        if dim is None or not value:
            return self._path
        if self._path.for_dimension(dim) is not None:
            return self._path
        return self._commit(DrillPath(self._path.levels + (DrillLevel(dim, str(value)),)))

    def reset_to_overview(self) -> DrillPath:
        return self._commit(DrillPath())

    def truncate_at(self, index: int) -> DrillPath:
        index = max(0, int(index))
        return self._commit(DrillPath(self._path.levels[:index]))

    def resolve_display_data(self, dimension: Dimension) -> List[DisplayRecord]:
        dim = as_dimension(dimension)
        dataset = self._datasets.get(dim) if dim is not None else None
        if dataset is None:
            return []

        drill = self._path.for_dimension(dim)
        if drill is None:
            return list(dataset.top_level)

        children = dataset.children.get(drill.value, ())
        return [
            DisplayRecord(label=child.label, value=child.value, color=self._palette[i % len(self._palette)])
            for i, child in enumerate(children)
        ]

    def breadcrumbs(self) -> List[Dict[str, Any]]:
        crumbs: List[Dict[str, Any]] = [{"index": 0, "label": "Overview", "dimension": None}]
        for i, level in enumerate(self._path.levels):
            crumbs.append({"index": i + 1, "label": level.value, "dimension": level.dimension.value})
        return crumbs

    def display_records(self, dimension: Dimension) -> List[Dict[str, Any]]:
        return [asdict(r) for r in self.resolve_display_data(dimension)]
