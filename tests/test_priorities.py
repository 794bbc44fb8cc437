import pytest

from core.enums import TaskPriority
from core.priorities import COMPLEXITY_BONUS, DEFAULT_PRIORITY, normalize_priority, priority_complexity


@pytest.mark.parametrize(
    "value, expected",
    [
        ("urgent", TaskPriority.URGENT),
        (" High ", TaskPriority.HIGH),
        (TaskPriority.LOW, TaskPriority.LOW),
        ("someday", DEFAULT_PRIORITY),
        (None, DEFAULT_PRIORITY),
    ],
)
def test_normalize_priority(value, expected):
    assert normalize_priority(value) == expected


def test_complexity_bonus_only_for_high_and_urgent():
    assert set(COMPLEXITY_BONUS) == set(TaskPriority)
    assert priority_complexity("URGENT") == 25
    assert priority_complexity(TaskPriority.HIGH) == 15
    assert priority_complexity("low") == 0
    assert priority_complexity("unknown") == 0
