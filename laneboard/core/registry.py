"""
FILE: laneboard/core/registry.py
PURPOSE: Ordered, partitioned view of a project's workflow lanes
EXPORTS:
  - LaneRegistry (immutable per-project lane snapshot)
  - builtin_lanes(project_id) -> List[WorkflowLane]
  - classify_lane(lane) -> section
  - section_of_order(order) -> section
  - next_order_for(section, existing_lanes) -> Order
  - spread_orders(section, count) -> List[Order]
  - validate_new_lane(project_id, title, existing_lanes) -> str
DEPENDENCIES:
  - laneboard.core.models (WorkflowLane, FixedStage)
  - laneboard.core.constants (anchors, sections)
  - laneboard.core.exceptions (EmptyTitleError, DuplicateLaneTitleError, ...)
NOTES:
  - Fixed stages are built in; persisted lanes with a fixed status override them
  - Custom lanes sit strictly inside (20,30) or (30,40); compact (2,3)/(3,4) accepted
  - When a section is full the next order is the midpoint to the ceiling
  - Pure functions; nothing here touches the database
"""

import logging
import math
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import (
    RESERVED_ORDERS,
    SECTION_FIXED,
    SECTION_AFTER_IN_PROGRESS,
    SECTION_AFTER_QA,
    CUSTOM_SECTIONS,
    SECTION_BOUNDS,
    COMPACT_SECTION_BOUNDS,
    ORDER_QA,
)
from .exceptions import (
    EmptyTitleError,
    DuplicateLaneTitleError,
    InvalidInputError,
    InvalidReorderError,
)
from .models import FixedStage, Order, WorkflowLane, normalize_order


logger = logging.getLogger(__name__)

BUILTIN_COLORS = {
    FixedStage.TODO: "#6B7280",
    FixedStage.IN_PROGRESS: "#3B82F6",
    FixedStage.QA: "#F59E0B",
    FixedStage.DONE: "#10B981",
}


def builtin_lanes(project_id: int) -> List[WorkflowLane]:
    """The four fixed task lanes every project starts with."""
    return [
        WorkflowLane(
            id=f"fixed-{project_id}-{stage.column_key}",
            project_id=project_id,
            title=stage.title,
            status_value=stage.status,
            display_order=stage.anchor,
            color=BUILTIN_COLORS[stage],
        )
        for stage in FixedStage
    ]


def _widen(order: Order) -> Order:
    """Map compact numbering onto the wide anchor scale (2.5 -> 25)."""
    for section in CUSTOM_SECTIONS:
        low, high = COMPACT_SECTION_BOUNDS[section]
        if low < order < high:
            return normalize_order(order * 10)
    return order


def section_of_order(order: Order) -> str:
    """
    Classify a display order into a lane section.

    Reserved anchors are fixed. Anything else is custom; orders outside both
    open intervals (legacy data) fall to the section on their side of QA.
    """
    if order in RESERVED_ORDERS:
        return SECTION_FIXED

    wide = _widen(order)
    for section in CUSTOM_SECTIONS:
        low, high = SECTION_BOUNDS[section]
        if low < wide < high:
            return section

    return SECTION_AFTER_IN_PROGRESS if wide < ORDER_QA else SECTION_AFTER_QA


def classify_lane(lane: WorkflowLane) -> str:
    """Return SECTION_FIXED, SECTION_AFTER_IN_PROGRESS or SECTION_AFTER_QA."""
    if lane.is_fixed:
        return SECTION_FIXED
    return section_of_order(lane.display_order)


def _require_custom_section(section: str) -> Tuple[int, int]:
    if section not in SECTION_BOUNDS:
        raise InvalidInputError(
            f"Invalid section '{section}'. Must be one of: {', '.join(CUSTOM_SECTIONS)}"
        )
    return SECTION_BOUNDS[section]


def next_order_for(section: str, existing_lanes: Iterable[WorkflowLane]) -> Order:
    """
    Compute the display order for a new lane appended to a section.

    Args:
        section: SECTION_AFTER_IN_PROGRESS or SECTION_AFTER_QA
        existing_lanes: Lanes currently in the project (any section)

    Returns:
        max(order in section, default floor) + 1 while the section has room,
        otherwise the midpoint between the section maximum and its ceiling

    Raises:
        InvalidInputError: If section is not a custom section
    """
    floor, ceiling = _require_custom_section(section)

    orders = [
        _widen(lane.display_order)
        for lane in existing_lanes
        if classify_lane(lane) == section
    ]
    top = max((o for o in orders if floor < o < ceiling), default=floor)

    candidate = math.floor(top) + 1
    if candidate <= ceiling - 1:
        return candidate

    # Saturated: stay strictly below the ceiling without reusing a value
    saturated = normalize_order((top + ceiling) / 2)
    logger.warning(
        "Section %s is saturated, using fractional order %s", section, saturated
    )
    return saturated


def spread_orders(section: str, count: int) -> List[Order]:
    """Orders for `count` lanes laid out by position inside a section."""
    floor, ceiling = _require_custom_section(section)
    width = ceiling - floor
    if count < width:
        return [floor + 1 + i for i in range(count)]
    step = width / (count + 1)
    return [normalize_order(floor + step * (i + 1)) for i in range(count)]


def validate_new_lane(
    project_id: int,
    title: str,
    existing_lanes: Iterable[WorkflowLane],
    exclude_lane_id: Optional[str] = None,
) -> str:
    """
    Validate a lane title before any persistence call is issued.

    Args:
        project_id: Project the lane belongs to
        title: Proposed title
        existing_lanes: Lanes to check against
        exclude_lane_id: Lane being renamed (skipped in the duplicate check)

    Returns:
        The trimmed title

    Raises:
        EmptyTitleError: If the title is empty after trimming
        DuplicateLaneTitleError: If a custom lane in the project has the same
            title, compared case-insensitively after trimming
    """
    cleaned = (title or "").strip()
    if not cleaned:
        raise EmptyTitleError()

    wanted = cleaned.casefold()
    for lane in existing_lanes:
        if lane.project_id != project_id or lane.id == exclude_lane_id:
            continue
        if classify_lane(lane) == SECTION_FIXED:
            continue
        if lane.title.strip().casefold() == wanted:
            raise DuplicateLaneTitleError(cleaned, project_id)

    return cleaned


def _sort_key(lane: WorkflowLane):
    # Custom sections sort right after the anchor that opens them
    section = classify_lane(lane)
    if section == SECTION_FIXED:
        stage = FixedStage.from_status(lane.status_value)
        anchor = stage.anchor if stage else lane.display_order
        return (anchor, anchor, lane.id)
    floor, _ = SECTION_BOUNDS[section]
    return (floor + 0.5, _widen(lane.display_order), lane.id)


class LaneRegistry:
    """
    Immutable, ordered lanes of one project: fixed stages plus custom lanes.

    Built once per fetched snapshot and shared read-only by the mapper and
    the projector.
    """

    def __init__(self, project_id: int, lanes: Sequence[WorkflowLane]):
        self.project_id = project_id
        self._lanes: Tuple[WorkflowLane, ...] = tuple(sorted(lanes, key=_sort_key))
        self._by_id: Dict[str, WorkflowLane] = {lane.id: lane for lane in self._lanes}

    @classmethod
    def from_persisted(
        cls, project_id: int, persisted: Iterable[WorkflowLane]
    ) -> "LaneRegistry":
        """
        Merge persisted lanes with the built-in fixed lanes.

        Lanes of other projects are ignored. A persisted lane holding a fixed
        status code replaces the built-in lane for that stage, keeping the
        stage anchor. Only the first lane holding a given status survives.
        """
        by_status: Dict[str, WorkflowLane] = {
            lane.status_value: lane for lane in builtin_lanes(project_id)
        }
        overridden = set()

        for lane in persisted:
            if lane.project_id != project_id:
                continue

            if lane.is_fixed:
                if lane.status_value in overridden:
                    logger.warning(
                        "Ignoring lane %s: status %s already taken",
                        lane.id, lane.status_value,
                    )
                    continue
                stage = FixedStage.from_status(lane.status_value)
                by_status[lane.status_value] = replace(lane, display_order=stage.anchor)
                overridden.add(lane.status_value)
                continue

            if lane.status_value in by_status:
                logger.warning(
                    "Ignoring lane %s: status %s already taken",
                    lane.id, lane.status_value,
                )
                continue
            by_status[lane.status_value] = lane

        return cls(project_id, list(by_status.values()))

    # --- Queries ---

    @property
    def lanes(self) -> Tuple[WorkflowLane, ...]:
        return self._lanes

    def list_lanes(self) -> List[WorkflowLane]:
        """All lanes in board order (ascending display order)."""
        return list(self._lanes)

    def __iter__(self):
        return iter(self._lanes)

    def __len__(self) -> int:
        return len(self._lanes)

    def get(self, lane_id: str) -> Optional[WorkflowLane]:
        return self._by_id.get(lane_id)

    def find_by_status(self, status: str) -> Optional[WorkflowLane]:
        return next((l for l in self._lanes if l.status_value == status), None)

    def find_by_title(self, title: str) -> Optional[WorkflowLane]:
        """Case-insensitive title lookup."""
        wanted = title.strip().casefold()
        return next((l for l in self._lanes if l.title.strip().casefold() == wanted), None)

    def custom_lanes(self) -> List[WorkflowLane]:
        return [l for l in self._lanes if classify_lane(l) != SECTION_FIXED]

    def lanes_in(self, section: str) -> List[WorkflowLane]:
        return [l for l in self._lanes if classify_lane(l) == section]

    # --- Rules ---

    def next_order_for(self, section: str) -> Order:
        return next_order_for(section, self._lanes)

    def validate_new_lane(self, title: str, exclude_lane_id: Optional[str] = None) -> str:
        return validate_new_lane(self.project_id, title, self._lanes, exclude_lane_id)

    def reorder(self, lane_ids: Sequence[str]) -> List[str]:
        """
        Check that lane_ids is a permutation of this project's custom lanes.

        Returns:
            The ids, ready to forward to persistence

        Raises:
            InvalidReorderError: On duplicates, unknown ids or missing lanes
        """
        ids = [str(i) for i in lane_ids]
        if len(ids) != len(set(ids)):
            raise InvalidReorderError("Reorder list contains duplicate lane ids")

        expected = {lane.id for lane in self.custom_lanes()}
        unknown = [i for i in ids if i not in expected]
        missing = sorted(expected - set(ids))
        if unknown:
            raise InvalidReorderError(f"Unknown or fixed lane ids: {', '.join(unknown)}")
        if missing:
            raise InvalidReorderError(f"Reorder list is missing lanes: {', '.join(missing)}")

        return ids
