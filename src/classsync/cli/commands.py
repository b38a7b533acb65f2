# src/classsync/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import date
from typing import cast

from ..core.errors import ClassSyncError, ValidationError
from ..core.state import AppState
from ..llm.client import friendly_llm_error_message
from ..llm.extraction import InlineImage
from ..tasks import task_api
from ..tasks.drafts import DraftForm
from ..tasks.task_models import Priority, Task
from ..tasks.task_query import StatusFilter, is_overdue

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._keeps_pending_delete: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        *,
        keeps_pending_delete: bool = False,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler
        if keeps_pending_delete:
            self._keeps_pending_delete.update([key, *(a.lower() for a in aliases)])

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        # A delete prompt only answers the very next command.
        if name not in self._keeps_pending_delete:
            state.pending_delete_id = None

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----

def short_id(task: Task) -> str:
    return task.id[:SHORT_ID_LEN]


def format_task(task: Task, today: date) -> str:
    box = "[x]" if task.completed else "[ ]"
    due = task.deadline.isoformat()
    if is_overdue(task, today):
        due += " (overdue)"
    line = f"{box} {short_id(task):<8} {due:<20} {task.priority.value:<6} {task.title} / {task.teacher}"
    if task.image_url:
        line += " [image]"
    return line


def format_draft(draft: DraftForm) -> str:
    return (
        "Draft:\n"
        f"  Title:       {draft.title or '-'}\n"
        f"  Teacher:     {draft.teacher or '-'}\n"
        f"  Deadline:    {draft.deadline or '(today)'}\n"
        f"  Priority:    {draft.priority.value}\n"
        f"  Description: {draft.description or '-'}\n"
        f"  Image:       {'attached' if draft.image_url else 'none'}"
    )


def _resolve_task(state: AppState, args: list[str]) -> Task | str:
    """Find one task by (short) id. Returns an error message on failure."""
    if not args:
        return "Missing task id. Use /list to see ids."
    matches = state.task_store.find_by_prefix(args[0])
    if not matches:
        return f"No task with id {args[0]}."
    if len(matches) > 1:
        return f"Ambiguous id {args[0]}: {len(matches)} tasks match. Type more characters."
    return matches[0]


def _ensure_draft(state: AppState) -> DraftForm:
    if state.draft is None:
        state.draft = DraftForm()
    return state.draft


# ---- handlers ----

def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    ai = f"AI ({getattr(state.settings, 'ai_model', '?')})" if state.ai_online else "OFFLINE heuristics"
    total = state.task_store.count_tasks()
    done = sum(1 for t in state.task_store.tasks if t.completed)
    lines = [
        "Status:",
        f"  Tasks: {total} ({total - done} active, {done} completed)",
        f"  View: filter={state.status_filter.value} search={state.search_text!r}",
        f"  Auto-fill: {ai}",
    ]
    if state.task_store.last_persist_error is not None:
        lines.append(f"  Storage: last save FAILED ({state.task_store.last_persist_error})")
    return "\n".join(lines)


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                      -> current view (filter + search)
    /list all|active|completed -> switch filter, then list
    """
    if args:
        try:
            task_api.set_view(state, status_filter=args[0].lower())
        except ValueError:
            return "Usage: /list [all|active|completed]"

    tasks = task_api.current_view(state)
    if not tasks:
        if state.search_text:
            return "No tasks found. Try adjusting your search terms."
        return "No tasks found. You're all caught up! Use /add or /autofill to add more assignments."

    today = date.today()
    header = f"Assignments ({state.status_filter.value}"
    header += f", search {state.search_text!r})" if state.search_text else ")"
    return "\n".join([header, *(format_task(t, today) for t in tasks)])


def cmd_filter(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Filter is {state.status_filter.value}. Use /filter all|active|completed."
    try:
        task_api.set_view(state, status_filter=args[0].lower())
    except ValueError:
        return "Usage: /filter all|active|completed"
    return f"Filter set to {state.status_filter.value}."


def cmd_search(state: AppState, args: list[str]) -> str:
    text = " ".join(args)
    task_api.set_view(state, search_text=text)
    return f"Searching for {text!r}." if text else "Search cleared."


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add title | teacher | deadline | priority | description
    Only title and teacher are required; deadline defaults to today.
    """
    raw = " ".join(args)
    parts = [p.strip() for p in raw.split("|")]
    if len(parts) < 2:
        return "Usage: /add title | teacher | [YYYY-MM-DD] | [High|Medium|Low] | [description]"

    form = DraftForm(title=parts[0], teacher=parts[1])
    if len(parts) > 2:
        form.deadline = parts[2]
    if len(parts) > 3 and parts[3]:
        try:
            form.priority = Priority.parse(parts[3])
        except ValueError:
            return f"Unknown priority {parts[3]!r}. Use High, Medium or Low."
    if len(parts) > 4:
        form.description = " | ".join(parts[4:])

    try:
        task = task_api.create_task(state, form.to_draft(date.today()))
    except ValidationError as e:
        return str(e)
    return f"Added {short_id(task)}: {task.title} (due {task.deadline.isoformat()})."


def cmd_image(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /image <path-to-image>"
    path = " ".join(args)
    try:
        image = InlineImage.from_path(path)
    except OSError as e:
        return f"Could not read image: {e}"
    _ensure_draft(state).attach_image(image)
    return f"Attached {image.mime_type} image to the draft."


def cmd_autofill(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /autofill <messy notes>  -> extract a task from notes (and the attached image)
    /autofill                -> re-run on the current draft description/image
    """
    draft = _ensure_draft(state)
    if args:
        draft.description = " ".join(args)

    if emit:
        emit("[AI] Analyzing...")

    try:
        draft.autofill(state.extractor)
    except ClassSyncError as e:
        logger.info("Auto-fill failed: %s", e)
        return friendly_llm_error_message(e)

    return format_draft(draft) + "\nUse /save to add it, /discard to drop it."


def cmd_draft(state: AppState, args: list[str]) -> str:
    if state.draft is None:
        return "No draft. Use /autofill <notes> or /image <path> to start one."
    return format_draft(state.draft)


def cmd_save(state: AppState, args: list[str]) -> str:
    if state.draft is None:
        return "No draft to save."
    try:
        task = task_api.create_task(state, state.draft.to_draft(date.today()))
    except ValidationError as e:
        return f"{e} Edit with /autofill or start over with /add."
    state.draft = None
    return f"Added {short_id(task)}: {task.title} (due {task.deadline.isoformat()})."


def cmd_discard(state: AppState, args: list[str]) -> str:
    if state.draft is None:
        return "No draft."
    state.draft = None
    return "Draft discarded."


def cmd_done(state: AppState, args: list[str]) -> str:
    found = _resolve_task(state, args)
    if isinstance(found, str):
        return found
    task_api.toggle_complete(state, found.id)
    now_done = not found.completed
    return f"{'Completed' if now_done else 'Reopened'}: {found.title}."


def cmd_delete(state: AppState, args: list[str]) -> str:
    found = _resolve_task(state, args)
    if isinstance(found, str):
        return found
    state.pending_delete_id = found.id
    return f"Are you sure you want to delete {found.title!r}? Use /confirm to delete or /cancel."


def cmd_confirm(state: AppState, args: list[str]) -> str:
    task_id = state.pending_delete_id
    if task_id is None:
        return "Nothing to confirm."
    task = state.task_store.get(task_id)
    task_api.delete_task(state, task_id)
    state.pending_delete_id = None
    return f"Deleted: {task.title}." if task is not None else "Task was already gone."


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if state.pending_delete_id is None:
        return "Nothing to cancel."
    state.pending_delete_id = None
    return "Delete cancelled."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task totals, view and auto-fill mode.")
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|active|completed].", aliases=["ls"]
)
registry.register("filter", cmd_filter, help_text="Set status filter: /filter all|active|completed.")
registry.register("search", cmd_search, help_text="Search title/teacher/description: /search [text].")
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add title | teacher | [YYYY-MM-DD] | [priority] | [description].",
)
registry.register("image", cmd_image, help_text="Attach an image to the draft: /image <path>.")
registry.register(
    "autofill", cmd_autofill, help_text="AI auto-fill a draft: /autofill <messy notes>.", aliases=["ai"]
)
registry.register("draft", cmd_draft, help_text="Show the current draft.")
registry.register("save", cmd_save, help_text="Save the current draft as a task.")
registry.register("discard", cmd_discard, help_text="Drop the current draft.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("delete", cmd_delete, help_text="Delete a task (asks to confirm): /delete <id>.", aliases=["rm"])
registry.register(
    "confirm", cmd_confirm, help_text="Confirm a pending delete.", keeps_pending_delete=True
)
registry.register(
    "cancel", cmd_cancel, help_text="Cancel a pending delete.", keeps_pending_delete=True
)
