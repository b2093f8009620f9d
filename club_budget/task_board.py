"""Task board for event planning.

A board is an ordered tuple of :class:`EventTask`, either one event's own
tasks or the shared central board. Every operation returns a new tuple and
leaves the input alone; an unknown id makes the operation a no-op.

Status is a plain tri-state label: any status may move to any other.

Task edits are staged in a :class:`TaskEditBuffer`. Checklist structure
changes made while editing live only in the buffer until :func:`edit_task`
commits the whole buffer in one replace; dropping the buffer cancels them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import (
    ZERO,
    ChecklistItem,
    EventExpense,
    EventTask,
    Number,
    TaskStatus,
    new_checklist_item,
    new_task,
    parse_amount,
)

Tasks = Tuple[EventTask, ...]

STATUS_ORDER: Tuple[TaskStatus, ...] = (TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE)


def find_task(tasks: Sequence[EventTask], task_id: str) -> Optional[EventTask]:
    return next((task for task in tasks if task.id == task_id), None)


def _replace_task(tasks: Sequence[EventTask], task_id: str, updated: EventTask) -> Tasks:
    return tuple(updated if task.id == task_id else task for task in tasks)


def add_task(
    tasks: Sequence[EventTask],
    title: str,
    description: str = '',
    assignee: Optional[str] = None,
    budget: Optional[Number] = None,
) -> Tasks:
    """Append a new Todo task; a blank title leaves the board unchanged."""
    if not title or not title.strip():
        return tuple(tasks)
    return tuple(tasks) + (new_task(title, description, assignee, budget),)


def delete_task(tasks: Sequence[EventTask], task_id: str) -> Tasks:
    return tuple(task for task in tasks if task.id != task_id)


def set_status(tasks: Sequence[EventTask], task_id: str, status: TaskStatus) -> Tasks:
    task = find_task(tasks, task_id)
    if task is None:
        return tuple(tasks)
    return _replace_task(tasks, task_id, replace(task, status=TaskStatus(status)))


def move_task(tasks: Sequence[EventTask], task_id: str, target: TaskStatus) -> Tasks:
    """Drag-style move: only changes the board when the status differs."""
    task = find_task(tasks, task_id)
    if task is None or task.status == TaskStatus(target):
        return tuple(tasks)
    return set_status(tasks, task_id, target)


def toggle_checklist_item(tasks: Sequence[EventTask], task_id: str, item_id: str) -> Tasks:
    """Flip one checklist item on a saved task (outside of edit mode)."""
    task = find_task(tasks, task_id)
    if task is None or not any(item.id == item_id for item in task.checklist):
        return tuple(tasks)
    checklist = tuple(
        replace(item, completed=not item.completed) if item.id == item_id else item
        for item in task.checklist
    )
    return _replace_task(tasks, task_id, replace(task, checklist=checklist))


# ---------------------------------------------------------------------------
# Staged editing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaskEditBuffer:
    """Pending edits for a single task."""

    task_id: str
    title: str
    description: str
    assignee: str
    budget_text: str
    checklist: Tuple[ChecklistItem, ...]
    linked_event_id: Optional[str]

    def add_checklist_item(self, text: str) -> 'TaskEditBuffer':
        if not text or not text.strip():
            return self
        return replace(self, checklist=self.checklist + (new_checklist_item(text),))

    def remove_checklist_item(self, item_id: str) -> 'TaskEditBuffer':
        return replace(self, checklist=tuple(i for i in self.checklist if i.id != item_id))

    def edit_checklist_item_text(self, item_id: str, text: str) -> 'TaskEditBuffer':
        return replace(
            self,
            checklist=tuple(replace(i, text=text) if i.id == item_id else i for i in self.checklist),
        )

    def toggle_checklist_item(self, item_id: str) -> 'TaskEditBuffer':
        return replace(
            self,
            checklist=tuple(
                replace(i, completed=not i.completed) if i.id == item_id else i
                for i in self.checklist
            ),
        )


def begin_edit(task: EventTask) -> TaskEditBuffer:
    return TaskEditBuffer(
        task_id=task.id,
        title=task.title,
        description=task.description,
        assignee=task.assignee,
        budget_text=str(task.budget),
        checklist=task.checklist,
        linked_event_id=task.linked_event_id,
    )


def edit_task(tasks: Sequence[EventTask], task_id: str, buffer: TaskEditBuffer) -> Tasks:
    """Commit a whole edit buffer onto the task in a single replace.

    Status is not part of an edit; the task keeps whatever status it has on
    the board at commit time.
    """
    task = find_task(tasks, task_id)
    if task is None:
        return tuple(tasks)
    updated = replace(
        task,
        title=buffer.title,
        description=buffer.description,
        assignee=buffer.assignee,
        budget=parse_amount(buffer.budget_text),
        checklist=buffer.checklist,
        linked_event_id=buffer.linked_event_id or None,
    )
    return _replace_task(tasks, task_id, updated)


# ---------------------------------------------------------------------------
# Read helpers
# ---------------------------------------------------------------------------


def tasks_by_status(tasks: Iterable[EventTask]) -> Dict[TaskStatus, List[EventTask]]:
    columns: Dict[TaskStatus, List[EventTask]] = {status: [] for status in STATUS_ORDER}
    for task in tasks:
        columns[task.status].append(task)
    return columns


def checklist_progress(task: EventTask) -> Tuple[int, int]:
    """Return (completed, total) checklist counts."""
    return sum(1 for item in task.checklist if item.completed), len(task.checklist)


def allocated_budget(tasks: Iterable[EventTask]) -> Decimal:
    return sum((task.budget for task in tasks), ZERO)


def remaining_budget(event: EventExpense, tasks: Optional[Iterable[EventTask]] = None) -> Decimal:
    """Event budget minus task allocations; negative means over-allocated."""
    return event.amount - allocated_budget(event.tasks if tasks is None else tasks)


def is_over_allocated(event: EventExpense, tasks: Optional[Iterable[EventTask]] = None) -> bool:
    return remaining_budget(event, tasks) < 0


def resolve_linked_event(task: EventTask, events: Iterable[EventExpense]) -> Optional[EventExpense]:
    """Look up the linked event; a deleted event simply means no link."""
    if not task.linked_event_id:
        return None
    return next((event for event in events if event.id == task.linked_event_id), None)


def linkable_events(events: Iterable[EventExpense], exclude_id: Optional[str] = None) -> List[EventExpense]:
    return [event for event in events if event.id != exclude_id]


def checklist_markers(task: EventTask) -> str:
    """Render a checklist inline as ``[x] done; [ ] open``."""
    return '; '.join(f"[{'x' if item.completed else ' '}] {item.text}" for item in task.checklist)
