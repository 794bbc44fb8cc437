"""ORM models and read snapshots exposed by the ThinkSpace planning core."""
from .area import Area, AreaActivity, AreaReview
from .content import Note, Resource, SubInterest
from .project import Project
from .task import Task, TaskDependency

__all__ = [
    "Area",
    "AreaActivity",
    "AreaReview",
    "Note",
    "Project",
    "Resource",
    "SubInterest",
    "Task",
    "TaskDependency",
]
