"""
FILE: laneboard/core/constants.py
PURPOSE: Constants used throughout the lane engine
EXPORTS:
  - Status codes for fixed task stages (STATUS_TO_DO, ...)
  - Column keys for fixed columns (COLUMN_TODO, ...)
  - Story column keys (STORY_COLUMNS)
  - Ordering anchors and custom sections (RESERVED_ORDERS, SECTION_BOUNDS)
  - Item types for drag and drop (ITEM_TASK, ITEM_STORY)
  - Defaults (DEFAULT_LANE_COLOR, REFRESH_INTERVAL_SECONDS)
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Single source of truth for status codes and order anchors
  - Custom lanes live strictly between two adjacent anchors
"""

# Persisted task status codes for the fixed pipeline stages
STATUS_TO_DO = "TO_DO"
STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_QA_REVIEW = "QA_REVIEW"
STATUS_DONE = "DONE"
FIXED_STATUSES = (STATUS_TO_DO, STATUS_IN_PROGRESS, STATUS_QA_REVIEW, STATUS_DONE)

# Status tokens generated for custom lanes start with this prefix
CUSTOM_STATUS_PREFIX = "custom_lane_"

# Board column keys for the fixed task columns
COLUMN_TODO = "todo"
COLUMN_IN_PROGRESS = "inprogress"
COLUMN_QA = "qa"
COLUMN_DONE = "done"
FIXED_COLUMNS = (COLUMN_TODO, COLUMN_IN_PROGRESS, COLUMN_QA, COLUMN_DONE)

# Story cards can also sit in the backlog or the Stories header column
COLUMN_BACKLOG = "backlog"
COLUMN_STORIES = "stories"
STORY_COLUMNS = (
    COLUMN_BACKLOG,
    COLUMN_STORIES,
    COLUMN_TODO,
    COLUMN_IN_PROGRESS,
    COLUMN_QA,
    COLUMN_DONE,
)
DEFAULT_STORY_STATUS = COLUMN_STORIES

# Ordering anchors. 1-4 are the compact positions of the fixed stages,
# 10/20/30/40 the wide anchors that custom lanes are placed between.
ORDER_STORIES = 1
ORDER_TODO = 10
ORDER_IN_PROGRESS = 20
ORDER_QA = 30
ORDER_DONE = 40
RESERVED_ORDERS = frozenset({1, 2, 3, 4, 10, 20, 30, 40})

# Custom lane sections
SECTION_FIXED = "fixed"
SECTION_AFTER_IN_PROGRESS = "customAfterInProgress"
SECTION_AFTER_QA = "customAfterQA"
CUSTOM_SECTIONS = (SECTION_AFTER_IN_PROGRESS, SECTION_AFTER_QA)

# (floor, ceiling) open intervals, wide and compact numbering
SECTION_BOUNDS = {
    SECTION_AFTER_IN_PROGRESS: (ORDER_IN_PROGRESS, ORDER_QA),
    SECTION_AFTER_QA: (ORDER_QA, ORDER_DONE),
}
COMPACT_SECTION_BOUNDS = {
    SECTION_AFTER_IN_PROGRESS: (2, 3),
    SECTION_AFTER_QA: (3, 4),
}

# Aliases accepted by the CLI/REPL for "insert after" targets
SECTION_ALIASES = {
    "inprogress": SECTION_AFTER_IN_PROGRESS,
    "in-progress": SECTION_AFTER_IN_PROGRESS,
    "qa": SECTION_AFTER_QA,
}

# Drag and drop item types
ITEM_TASK = "task"
ITEM_STORY = "story"
ITEM_TYPES = (ITEM_TASK, ITEM_STORY)

# Default values
DEFAULT_LANE_COLOR = "#3B82F6"
REFRESH_INTERVAL_SECONDS = 30.0
LANE_ID_PREFIX = "WFLN"
