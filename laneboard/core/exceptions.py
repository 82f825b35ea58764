"""
FILE: laneboard/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - LaneboardError (base exception)
  - InvalidInputError, EmptyTitleError, DuplicateLaneTitleError
  - InvalidReorderError, InvalidMoveError
  - ProjectNotFoundError, SprintNotFoundError, StoryNotFoundError
  - TaskNotFoundError, LaneNotFoundError
  - MoveAlreadyInProgressError
  - PersistenceError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from LaneboardError for easy catching
  - Validation errors are raised before any persistence call
  - Service layer raises these, UI layers catch and display
  - Column/status mapping never raises; it degrades to fallbacks
"""


class LaneboardError(Exception):
    """Base exception for all Laneboard errors."""
    pass


class InvalidInputError(LaneboardError):
    """Input validation failed."""

    def __init__(self, message: str):
        super().__init__(message)


class EmptyTitleError(InvalidInputError):
    """Lane title is empty after trimming."""

    def __init__(self):
        super().__init__("Lane title cannot be empty")


class DuplicateLaneTitleError(InvalidInputError):
    """A custom lane with the same title already exists in the project."""

    def __init__(self, title: str, project_id: int):
        self.title = title
        self.project_id = project_id
        super().__init__(
            f"A lane titled '{title}' already exists in project {project_id}"
        )


class InvalidReorderError(InvalidInputError):
    """Reorder request is not a permutation of the project's custom lanes."""

    def __init__(self, message: str):
        super().__init__(message)


class InvalidMoveError(InvalidInputError):
    """Drop target is not valid for the dragged item."""

    def __init__(self, item_type: str, target: str):
        self.item_type = item_type
        self.target = target
        super().__init__(f"Cannot move {item_type} to column '{target}'")


class ProjectNotFoundError(LaneboardError):
    """Project with given ID doesn't exist."""

    def __init__(self, project_id: int):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class SprintNotFoundError(LaneboardError):
    """Sprint with given ID doesn't exist."""

    def __init__(self, sprint_id: int):
        self.sprint_id = sprint_id
        super().__init__(f"Sprint {sprint_id} not found")


class StoryNotFoundError(LaneboardError):
    """Story with given ID doesn't exist."""

    def __init__(self, story_id: int):
        self.story_id = story_id
        super().__init__(f"Story {story_id} not found")


class TaskNotFoundError(LaneboardError):
    """Task with given ID doesn't exist."""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class LaneNotFoundError(LaneboardError):
    """Workflow lane with given ID doesn't exist."""

    def __init__(self, lane_id: str):
        self.lane_id = lane_id
        super().__init__(f"Lane {lane_id} not found")


class MoveAlreadyInProgressError(LaneboardError):
    """A status change for this item is still being committed."""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(
            f"A move for item {item_id} is already in progress, retry once it settles"
        )


class PersistenceError(LaneboardError):
    """The persistence collaborator failed; re-fetch to resynchronize."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")
