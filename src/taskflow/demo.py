"""Seed a board with the demo team, tasks and recent activity."""

from __future__ import annotations

from typing import Any, Optional

from .controller import BoardController
from .model import ActivityAction
from .schemas import TaskCreate

_AVATAR = "https://images.pexels.com/photos/{}/pexels-photo-{}.jpeg?auto=compress&cs=tinysrgb&w=400"

DEMO_USERS: list[dict[str, str]] = [
    {"key": "alice", "name": "Alice Johnson", "email": "alice@example.com", "photo": "1239291"},
    {"key": "bob", "name": "Bob Smith", "email": "bob@example.com", "photo": "614810"},
    {"key": "carol", "name": "Carol Williams", "email": "carol@example.com", "photo": "1130626"},
    {"key": "david", "name": "David Brown", "email": "david@example.com", "photo": "1040880"},
]

DEMO_TASKS: list[dict[str, Any]] = [
    {"title": "Design Homepage Layout",
     "description": "Create wireframes and mockups for the new homepage design",
     "status": "todo", "priority": "high", "assigned_to": "alice", "created_by": "alice"},
    {"title": "Implement User Authentication",
     "description": "Set up JWT-based authentication system with login/register functionality",
     "status": "in-progress", "priority": "high", "assigned_to": "bob", "created_by": "alice"},
    {"title": "Write API Documentation",
     "description": "Document all REST API endpoints with examples and response formats",
     "status": "todo", "priority": "medium", "assigned_to": "carol", "created_by": "bob"},
    {"title": "Set up Database Schema",
     "description": "Design and implement the database schema for users and tasks",
     "status": "done", "priority": "high", "assigned_to": "david", "created_by": "alice"},
    {"title": "Create Mobile Responsive Design",
     "description": "Ensure the application works well on mobile devices",
     "status": "in-progress", "priority": "medium", "assigned_to": "alice", "created_by": "carol"},
    {"title": "Implement Real-time Features",
     "description": "Add WebSocket support for real-time updates",
     "status": "todo", "priority": "low", "assigned_to": "bob", "created_by": "david"},
]

# Oldest first, so the log ends up newest first.
DEMO_ACTIVITIES: list[tuple[ActivityAction, str, str, str]] = [
    (ActivityAction.UPDATED, "Create Mobile Responsive Design", "alice", "Updated description and priority"),
    (ActivityAction.COMPLETED, "Set up Database Schema", "david", "Marked as completed"),
    (ActivityAction.ASSIGNED, "Write API Documentation", "carol", "Assigned to Carol Williams"),
    (ActivityAction.UPDATED, "Implement User Authentication", "bob", "Changed status to In Progress"),
    (ActivityAction.CREATED, "Design Homepage Layout", "alice", "Created new task with high priority"),
]


def seed_demo_board(board: Optional[BoardController] = None) -> tuple[BoardController, dict[str, str]]:
    """Populate *board* (or a new one) with the demo data.

    Returns the board and a mapping of short user keys (``"alice"``...) to
    the generated user ids.  Tasks are inserted directly into the store so
    that only the curated demo activities appear in the log.
    """
    board = board or BoardController()
    ids: dict[str, str] = {}
    names: dict[str, str] = {}
    for spec in DEMO_USERS:
        user = board.register_user(spec["name"], spec["email"], _AVATAR.format(spec["photo"], spec["photo"]))
        ids[spec["key"]] = user.id
        names[spec["key"]] = user.display_name

    for spec in DEMO_TASKS:
        data = TaskCreate.model_validate(
            {**spec, "assigned_to": ids[spec["assigned_to"]], "created_by": ids[spec["created_by"]]}
        )
        board.store.create_task(data)

    for action, title, actor, details in DEMO_ACTIVITIES:
        board.activity_log.record(action, names[actor], task_title=title, details=details)
    return board, ids
