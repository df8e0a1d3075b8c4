"""Board controller: the single entry-point for every board mutation.

It wraps :class:`EntityStore` and :class:`ActivityLog` with business logic:
payload validation, stale-edit detection, conflict bookkeeping, smart
assignment and audit logging.  Requests are processed one at a time; every
check runs before the first mutation so a failing request leaves the board
untouched.
"""

from __future__ import annotations

import threading
from typing import Any, Optional, Union

from loguru import logger

from .activity_log import ActivityLog
from .balancer import smart_assign as balance_assignment
from .config import BoardConfig
from .conflicts import detect_conflict, parse_strategy, resolve_conflict
from .constants import COLUMN_TITLES
from .errors import BoardError, ConflictClosedError, NotFoundError, ValidationError
from .model import Activity, ActivityAction, Conflict, ResolutionStrategy, Task, TaskStatus, User
from .peers import PeerEvent, PeerEventKind, PeerEventSource, PeerOutcome
from .schemas import TaskCreate, TaskPatch, UserRegistration, parse_payload
from .store import EntityStore
from .utils import BoardClock, _parse_iso

UpdateResult = Union[Task, Conflict]


class BoardController:
    """Orchestrate the shared task board.

    Parameters
    ----------
    store:
        Entity store to own.  A fresh one is created when omitted.
    activity_log:
        Activity log to own.  A fresh one is created when omitted.
    config:
        Board tunables; defaults to :class:`BoardConfig`.
    clock:
        Timestamp source shared by the store, the log and the controller.
    """

    def __init__(
        self,
        store: Optional[EntityStore] = None,
        activity_log: Optional[ActivityLog] = None,
        *,
        config: Optional[BoardConfig] = None,
        clock: Optional[BoardClock] = None,
    ) -> None:
        self.config = config if config is not None else BoardConfig()
        self.clock = clock if clock is not None else BoardClock()
        self.store = store if store is not None else EntityStore(self.clock, self.config.reserved_titles)
        if activity_log is None:
            activity_log = ActivityLog(self.config.activity_log_capacity, self.clock)
        self.activity_log = activity_log
        self._pending: dict[str, Conflict] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _actor_name(self, actor_id: Optional[str]) -> str:
        """Display name of the acting user; unknown ids raise NotFoundError."""
        if actor_id is None:
            return self.config.system_actor_name
        return self.store.require_user(actor_id).display_name

    def _user_name(self, user_id: Optional[str]) -> str:
        user = self.store.get_user(user_id) if user_id else None
        return user.display_name if user else "Unknown"

    def _log(self, action: ActivityAction, actor: str, task_title: str = "", details: str = "") -> Activity:
        return self.activity_log.record(action, actor, task_title=task_title, details=details)

    # ------------------------------------------------------------------
    # Users and sessions
    # ------------------------------------------------------------------

    def register_user(self, name: str, email: str, avatar_ref: Optional[str] = None) -> User:
        """Register a user.  An already registered address returns the existing user."""
        data = parse_payload(
            UserRegistration,
            {"display_name": name, "contact_address": email, "avatar_ref": avatar_ref},
        )
        with self._lock:
            existing = self.store.find_user_by_address(data.contact_address)
            if existing is not None:
                logger.debug("Address {} already registered as {}", data.contact_address, existing.id)
                return existing
            user = self.store.add_user(
                User(
                    display_name=data.display_name,
                    contact_address=data.contact_address,
                    avatar_ref=data.avatar_ref or self.config.default_avatar_ref,
                    created_at=self.clock(),
                )
            )
        logger.info("Registered user {}: {}", user.id, user.display_name)
        return user

    def update_profile(
        self,
        user_id: str,
        *,
        display_name: Optional[str] = None,
        avatar_ref: Optional[str] = None,
    ) -> User:
        with self._lock:
            return self.store.update_user_profile(user_id, display_name=display_name, avatar_ref=avatar_ref)

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return self.store.find_user_by_address(email)

    def list_users(self) -> list[User]:
        with self._lock:
            return self.store.list_users()

    def login(self, user_id: str) -> Activity:
        """Record that a user joined the board.  Credentials are checked upstream."""
        with self._lock:
            name = self._actor_name(user_id)
            return self._log(ActivityAction.LOGIN, name, details="Joined the board")

    def logout(self, user_id: str) -> Activity:
        with self._lock:
            name = self._actor_name(user_id)
            return self._log(ActivityAction.LOGOUT, name, details="Left the board")

    # ------------------------------------------------------------------
    # Task CRUD
    # ------------------------------------------------------------------

    def create_task(
        self,
        title: str,
        description: str = "",
        priority: str = "medium",
        assigned_to: str = "",
        created_by: str = "",
        status: str = "todo",
    ) -> Task:
        """Create a task and log it.  Raises ValidationError on bad input."""
        data = parse_payload(
            TaskCreate,
            {
                "title": title,
                "description": description,
                "priority": priority,
                "status": status,
                "assigned_to": assigned_to,
                "created_by": created_by,
            },
        )
        with self._lock:
            task = self.store.create_task(data)
            self._log(
                ActivityAction.CREATED,
                self._user_name(task.created_by),
                task.title,
                f"Created new task with {task.priority.value} priority",
            )
        logger.info("Created task {}: {}", task.id, task.title)
        return task

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._lock:
            return self.store.get_task(task_id)

    def list_tasks(self) -> list[Task]:
        with self._lock:
            return self.store.list_tasks()

    def list_by_status(self, status: TaskStatus | str) -> list[Task]:
        with self._lock:
            return self.store.list_by_status(status)

    def move_task(self, task_id: str, new_status: TaskStatus | str, actor_id: Optional[str] = None) -> Task:
        """Move a task to another column.  Moving to the current column is a no-op."""
        target = parse_payload(TaskPatch, {"status": new_status}).status
        with self._lock:
            task = self.store.require_task(task_id)
            actor = self._actor_name(actor_id)
            if task.status == target:
                logger.debug("Task {} already in {}", task_id, target.value)
                return task
            old = task.status
            moved = self.store.update_task(task_id, {"status": target}, updated_by=actor_id)
            self._log(ActivityAction.MOVED, actor, moved.title, f"Moved from {old.value} to {target.value}")
        logger.info("Moved task {} from {} to {}", task_id, old.value, target.value)
        return moved

    def update_task(
        self,
        task_id: str,
        patch: dict[str, Any] | TaskPatch,
        observed_updated_at: Optional[str] = None,
        editor_id: Optional[str] = None,
        *,
        details: str = "Updated task details",
    ) -> UpdateResult:
        """Apply an edit made against the version the editor last observed.

        Returns the updated task, or a :class:`Conflict` if the task changed
        since ``observed_updated_at``.  A conflict leaves the store and the
        activity log untouched; it stays pending until resolved or cancelled.
        """
        with self._lock:
            stored = self.store.require_task(task_id)
            changes = parse_payload(TaskPatch, patch).changes()
            if observed_updated_at is not None and _parse_iso(observed_updated_at) is None:
                raise ValidationError(f"Invalid observed version {observed_updated_at!r}")
            editor = self._actor_name(editor_id)
            if "assigned_to" in changes and self.store.get_user(changes["assigned_to"]) is None:
                raise ValidationError(f"'assigned_to' references unknown user {changes['assigned_to']}")
            conflict = detect_conflict(
                stored,
                task_id,
                changes,
                observed_updated_at,
                editor_id=editor_id,
                editor_name=editor,
                stored_editor_name=self._user_name(stored.updated_by),
                now=self.clock(),
            )
            if conflict is not None:
                self._pending[conflict.id] = conflict
                logger.warning(
                    "Conflict {} on task {}: {} edited a version older than {}",
                    conflict.id, task_id, editor, stored.updated_at,
                )
                return conflict
            task = self.store.update_task(task_id, changes, updated_by=editor_id)
            self._log(ActivityAction.UPDATED, editor, task.title, details)
        logger.info("Updated task {} fields={}", task_id, sorted(changes))
        return task

    def smart_assign(self, task_id: str, actor_id: Optional[str] = None) -> Task:
        """Reassign a task to the user with the fewest unfinished tasks."""
        with self._lock:
            task = self.store.require_task(task_id)
            actor = self._actor_name(actor_id)
            assigned = balance_assignment(task, self.store.list_users(), self.store.list_tasks(), self.clock())
            assigned.updated_by = actor_id
            assigned = self.store.replace_task(assigned)
            winner = self._user_name(assigned.assigned_to)
            self._log(ActivityAction.ASSIGNED, actor, assigned.title, f"Smart assigned to {winner}")
        logger.info("Smart assigned task {} to {}", task_id, assigned.assigned_to)
        return assigned

    def delete_task(self, task_id: str, actor_id: Optional[str] = None) -> None:
        with self._lock:
            self.store.require_task(task_id)
            actor = self._actor_name(actor_id)
            removed = self.store.delete_task(task_id)
            # Conflicts on a removed task can never be resolved.
            orphaned = [cid for cid, c in self._pending.items() if c.task_id == task_id]
            for cid in orphaned:
                del self._pending[cid]
            self._log(ActivityAction.DELETED, actor, removed.title, "Deleted task")
        logger.info("Deleted task {}: {}", task_id, removed.title)

    # ------------------------------------------------------------------
    # Conflicts
    # ------------------------------------------------------------------

    def pending_conflicts(self) -> list[Conflict]:
        with self._lock:
            return list(self._pending.values())

    def cancel_conflict(self, conflict: Conflict) -> bool:
        """Discard a pending conflict without touching the board."""
        with self._lock:
            dropped = self._pending.pop(conflict.id, None) is not None
        if dropped:
            logger.info("Conflict {} on task {} cancelled", conflict.id, conflict.task_id)
        return dropped

    def resolve_conflict(
        self,
        conflict: Conflict,
        strategy: ResolutionStrategy | str,
        chosen: Task | str | None,
        actor_id: Optional[str] = None,
    ) -> Task:
        """Resolve a pending conflict with ``overwrite`` or ``merge``.

        *chosen* is one of the conflict's versions, given either as a task or
        by label (``"a"``/``"b"``).  A failed attempt keeps the conflict
        pending; a successful one closes it for good.
        """
        kind = parse_strategy(strategy)
        if isinstance(chosen, str):
            try:
                chosen = conflict.version(chosen)
            except KeyError:
                chosen = None
        with self._lock:
            if conflict.id not in self._pending:
                raise ConflictClosedError(conflict.id)
            try:
                stored = self.store.require_task(conflict.task_id)
            except NotFoundError:
                self._pending.pop(conflict.id, None)
                raise
            actor = self._actor_name(actor_id)
            final = resolve_conflict(conflict, kind, chosen, stored, self.clock(), resolved_by=actor_id)
            task = self.store.replace_task(final)
            del self._pending[conflict.id]
            self._log(ActivityAction.UPDATED, actor, task.title, f"Resolved conflict ({kind.value})")
        logger.info("Resolved conflict {} on task {} by {}", conflict.id, task.id, kind.value)
        return task

    # ------------------------------------------------------------------
    # Activity and board views
    # ------------------------------------------------------------------

    def list_activities(self) -> list[Activity]:
        """Most recent activities, newest first."""
        with self._lock:
            return self.activity_log.snapshot()

    def get_board(self) -> dict[str, list[dict[str, Any]]]:
        """Return tasks grouped by status column, columns in board order."""
        columns: dict[str, list[dict[str, Any]]] = {status: [] for status in COLUMN_TITLES}
        with self._lock:
            tasks = self.store.list_tasks()
        for task in tasks:
            columns[task.status.value].append(task.to_dict())
        return columns

    # ------------------------------------------------------------------
    # Peer activity
    # ------------------------------------------------------------------

    def apply_peer_event(self, event: PeerEvent) -> Any:
        """Route a peer event through the regular entry points."""
        if event.kind == PeerEventKind.UPDATE:
            return self.update_task(
                event.task_id or "",
                dict(event.payload),
                event.observed_updated_at,
                event.actor_id,
                details=event.details or "Updated task details",
            )
        if event.kind == PeerEventKind.MOVE:
            return self.move_task(event.task_id or "", event.payload.get("status", ""), event.actor_id)
        if event.kind == PeerEventKind.CREATE:
            return self.create_task(created_by=event.actor_id, **dict(event.payload))
        if event.kind == PeerEventKind.ASSIGN:
            return self.smart_assign(event.task_id or "", event.actor_id)
        if event.kind == PeerEventKind.DELETE:
            return self.delete_task(event.task_id or "", event.actor_id)
        if event.kind == PeerEventKind.LOGIN:
            return self.login(event.actor_id)
        if event.kind == PeerEventKind.LOGOUT:
            return self.logout(event.actor_id)
        raise ValueError(f"Unsupported peer event kind: {event.kind}")

    def pump(self, source: PeerEventSource) -> list[PeerOutcome]:
        """Drain one batch from *source* and apply every event.

        A rejected event is recorded in its outcome and does not stop the
        rest of the batch.
        """
        outcomes: list[PeerOutcome] = []
        for event in source.poll():
            try:
                outcomes.append(PeerOutcome(event=event, result=self.apply_peer_event(event)))
            except BoardError as exc:
                logger.warning("Peer event {} from {} rejected: {}", event.kind.value, event.actor_id, exc)
                outcomes.append(PeerOutcome(event=event, error=exc))
        return outcomes

