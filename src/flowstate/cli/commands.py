# src/flowstate/cli/commands.py

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..focus.timer import FOCUS_DURATIONS, FocusTimer
from ..nlp.extractor import extract
from ..progress.engine import ProgressEvent
from ..tasks import task_api
from ..tasks.task_models import INBOX_ID, TODAY_VIEW, Task
from ..tasks.task_store import ProtectedProjectError

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_COLOR = "#22c55e"
DEFAULT_LABEL_COLOR = "#f59e0b"

_PRIORITY_BADGE = {"urgent": "!!", "high": "!h", "medium": "  ", "low": "!l"}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
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


# ---- helpers ----


def _resolve_task(state: AppState, ref: str) -> Task | None:
    """A task reference is a 1-based index into the last /list output or an id prefix."""
    if ref.isdigit():
        idx = int(ref) - 1
        if 0 <= idx < len(state.last_listing):
            return state.tasks.get_task(state.last_listing[idx])
        return None
    matches = [t for t in state.tasks.tasks if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _resolve_named(items, ref: str):
    low = ref.lower()
    for item in items:
        if item.id == ref or item.name.lower() == low:
            return item
    return None


def _format_task(task: Task, index: int | None = None) -> str:
    mark = "x" if task.completed else " "
    badge = _PRIORITY_BADGE[task.priority.value]
    due = f" (due {task.due_date:%a %Y-%m-%d})" if task.due_date else ""
    prefix = f"{index:>3}. " if index is not None else ""
    return f"{prefix}[{mark}] {badge} {task.title}{due}  #{task.id[:6]}"


def _format_event(event: ProgressEvent) -> str:
    lines = [f"+{event.xp_gained} XP"]
    if event.leveled_up:
        lines.append(f"Level up! You are now level {event.level_after}.")
    for a in event.unlocked:
        lines.append(f"Achievement unlocked: {a.icon} {a.name} - {a.description}")
    return "\n".join(lines)


def advance_focus_timer(state: AppState) -> str | None:
    """Tick the running focus timer by the wall-clock seconds since the last tick."""
    timer = state.timer
    if timer is None or not timer.running or state.timer_last_tick is None:
        return None

    now = time.monotonic()
    elapsed = int(now - state.timer_last_tick)
    if elapsed <= 0:
        return None
    state.timer_last_tick += elapsed

    if timer.tick(elapsed):
        state.timer = None
        state.timer_last_tick = None
        return f"Focus session complete ({timer.minutes} min)."
    return None


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    text = " ".join(args).strip()
    if not text:
        return "Usage: /add <task text> (e.g. /add call mom tomorrow !high)"

    project = state.tasks.filters.project
    project_id = project if project and project != TODAY_VIEW else INBOX_ID
    task = task_api.quick_add(state.tasks, text, project_id=project_id)
    if task is None:
        return "Nothing to add: the task needs a title."
    return f"Added: {_format_task(task)}"


def cmd_list(state: AppState, args: list[str]) -> str:
    groups = state.tasks.grouped()
    state.last_listing = []
    if not groups:
        return "No tasks here. Add one with /add or just type it."

    lines: list[str] = []
    for title, bucket in groups.sections():
        if not bucket:
            continue
        lines.append(f"{title}:")
        for task in bucket:
            state.last_listing.append(task.id)
            lines.append("  " + _format_task(task, len(state.last_listing)))
    return "\n".join(lines)


def cmd_next(state: AppState, args: list[str]) -> str:
    task = state.tasks.get_next_task()
    if task is None:
        return "All done: no open tasks."
    return f"Next up: {_format_task(task)}"


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        target = state.tasks.focus_task()
        if target is None:
            return "Usage: /done <n|id>"
    else:
        target = _resolve_task(state, args[0])
        if target is None:
            return f"No task matches {args[0]!r}."
    if target.completed:
        return f"Already done: {target.title}"

    event = task_api.complete_task(state.tasks, state.progress, target.id)
    reply = f"Completed: {target.title}"
    if event is not None:
        reply += "\n" + _format_event(event)
    focus = state.tasks.focus_task()
    if state.tasks.focus_mode:
        reply += f"\nFocus: {focus.title}" if focus else "\nFocus: nothing left to do."
    return reply


def cmd_undo(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /undo <n|id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."
    if not task.completed:
        return f"Not completed: {task.title}"
    state.tasks.toggle_complete(task.id)
    return f"Reopened: {task.title}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <n|id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."
    state.tasks.delete_task(task.id)
    return f"Deleted: {task.title}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <n|id> <new text>: re-parse title, priority and due date."""
    if len(args) < 2:
        return "Usage: /edit <n|id> <new text>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."
    parsed = extract(" ".join(args[1:]))
    if not parsed.title:
        return "The task needs a title."
    state.tasks.update_task(task.id, title=parsed.title, priority=parsed.priority, due_date=parsed.due_date)
    return f"Updated: {_format_task(task)}"


def cmd_project(state: AppState, args: list[str]) -> str:
    """
    /project                    -> list projects
    /project add <name> [color] -> create
    /project rm <name|id>       -> delete (tasks move to Inbox)
    /project <name|id|today|inbox|all> -> filter the list
    """
    store = state.tasks
    if not args or args[0].lower() == "ls":
        current = store.filters.project
        lines = ["Projects:"]
        for p in store.projects:
            count = sum(1 for t in store.tasks if t.project_id == p.id and not t.completed)
            marker = "*" if p.id == current else " "
            lines.append(f" {marker} {p.name} ({count} open)  #{p.id}")
        return "\n".join(lines)

    sub = args[0].lower()
    if sub == "add":
        if len(args) < 2:
            return "Usage: /project add <name> [color]"
        color = args[2] if len(args) > 2 else DEFAULT_PROJECT_COLOR
        project = store.add_project(name=args[1], color=color)
        return f"Project created: {project.name}"

    if sub == "rm":
        if len(args) < 2:
            return "Usage: /project rm <name|id>"
        project = _resolve_named(store.projects, args[1])
        if project is None:
            return f"No project matches {args[1]!r}."
        try:
            store.delete_project(project.id)
        except ProtectedProjectError:
            return "The Inbox cannot be deleted."
        return f"Project deleted: {project.name}. Its tasks moved to Inbox."

    if sub == "all":
        store.set_selected_project(None)
        return "Showing all projects."
    if sub == TODAY_VIEW:
        store.set_selected_project(TODAY_VIEW)
        return "Showing tasks due today."

    project = _resolve_named(store.projects, args[0])
    if project is None:
        return f"No project matches {args[0]!r}."
    store.set_selected_project(project.id)
    return f"Showing project {project.name}."


def cmd_label(state: AppState, args: list[str]) -> str:
    """
    /label                    -> list labels
    /label add <name> [color] -> create
    /label rm <name|id>       -> delete (removed from every task)
    /label <name|id|all>      -> filter the list
    """
    store = state.tasks
    if not args or args[0].lower() == "ls":
        if not store.labels:
            return "No labels yet. Create one with /label add <name>."
        current = store.filters.label
        return "Labels:\n" + "\n".join(
            f" {'*' if lb.id == current else ' '} {lb.name}  #{lb.id}" for lb in store.labels
        )

    sub = args[0].lower()
    if sub == "add":
        if len(args) < 2:
            return "Usage: /label add <name> [color]"
        color = args[2] if len(args) > 2 else DEFAULT_LABEL_COLOR
        label = store.add_label(name=args[1], color=color)
        return f"Label created: {label.name}"

    if sub == "rm":
        if len(args) < 2:
            return "Usage: /label rm <name|id>"
        label = _resolve_named(store.labels, args[1])
        if label is None:
            return f"No label matches {args[1]!r}."
        store.delete_label(label.id)
        return f"Label deleted: {label.name}"

    if sub == "all":
        store.set_selected_label(None)
        return "Label filter cleared."

    label = _resolve_named(store.labels, args[0])
    if label is None:
        return f"No label matches {args[0]!r}."
    store.set_selected_label(label.id)
    return f"Showing label {label.name}."


def cmd_tag(state: AppState, args: list[str]) -> str:
    """/tag <n|id> <label>: toggle a label on a task."""
    if len(args) < 2:
        return "Usage: /tag <n|id> <label>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches {args[0]!r}."
    label = _resolve_named(state.tasks.labels, args[1])
    if label is None:
        return f"No label matches {args[1]!r}."

    if label.id in task.labels:
        state.tasks.update_task(task.id, labels=[x for x in task.labels if x != label.id])
        return f"Removed {label.name} from {task.title}."
    state.tasks.update_task(task.id, labels=[*task.labels, label.id])
    return f"Tagged {task.title} with {label.name}."


def cmd_search(state: AppState, args: list[str]) -> str:
    query = " ".join(args).strip()
    state.tasks.set_search_query(query)
    return f"Searching for {query!r}." if query else "Search cleared."


def cmd_completed(state: AppState, args: list[str]) -> str:
    if not args:
        shown = state.tasks.filters.show_completed
        return f"Completed tasks are {'shown' if shown else 'hidden'}. Use /completed on|off."
    arg = args[0].lower()
    if arg in ("on", "1", "true", "yes", "show"):
        state.tasks.set_show_completed(True)
        return "Completed tasks are now shown."
    if arg in ("off", "0", "false", "no", "hide"):
        state.tasks.set_show_completed(False)
        return "Completed tasks are now hidden."
    return "Usage: /completed on|off"


def cmd_focus(state: AppState, args: list[str]) -> str:
    active = state.tasks.toggle_focus_mode()
    if not active:
        return "Focus mode off."
    task = state.tasks.focus_task()
    if task is None:
        return "Focus mode on, but there is nothing to do. Enjoy the break!"
    return f"Focus mode on. One thing at a time:\n  {_format_task(task)}\n/done to finish it, /skip for another."


def cmd_skip(state: AppState, args: list[str]) -> str:
    if not state.tasks.focus_mode:
        return "Focus mode is off. Use /focus first."
    before = state.tasks.current_focus_task
    state.tasks.skip_focus_task()
    task = state.tasks.focus_task()
    if task is None or task.id == before:
        return "No other task to switch to."
    return f"Switched focus to: {_format_task(task)}"


def cmd_session(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /session [start] [minutes] -> start a focus countdown (15/25/45/60)
    /session status            -> time left
    /session stop              -> abandon the countdown (no XP)
    """
    sub = args[0].lower() if args else "start"

    if sub == "status":
        if state.timer is None:
            return "No focus session running."
        return f"Focus session: {state.timer.format_remaining()} left of {state.timer.minutes} min."

    if sub == "stop":
        if state.timer is None:
            return "No focus session running."
        state.timer = None
        state.timer_last_tick = None
        return "Focus session stopped."

    raw = args[1] if sub == "start" and len(args) > 1 else (sub if sub.isdigit() else None)
    minutes = int(raw) if raw and raw.isdigit() else state.focus_minutes
    if minutes not in FOCUS_DURATIONS:
        return f"Pick a session length: {', '.join(str(m) for m in FOCUS_DURATIONS)} minutes."
    if state.timer is not None:
        return f"A session is already running ({state.timer.format_remaining()} left)."

    def _on_complete(mins: int) -> None:
        event = task_api.finish_focus_session(state.progress, mins)
        if emit is not None:
            emit(_format_event(event))

    state.timer = FocusTimer(minutes, on_complete=_on_complete)
    state.timer.start()
    state.timer_last_tick = time.monotonic()
    return f"Focus session started: {minutes} min. Check it with /session status."


def cmd_stats(state: AppState, args: list[str]) -> str:
    s = state.progress.stats()
    filled = int(s["level_progress"] * 20)
    bar = "#" * filled + "-" * (20 - filled)
    return (
        "Stats:\n"
        f"  Level {s['level']}  [{bar}]  {s['xp']}/{s['xp_for_next_level']} XP\n"
        f"  Streak: {s['streak']} day(s)\n"
        f"  Today: {s['tasks_completed_today']} task(s)\n"
        f"  Total: {s['total_tasks_completed']} task(s), "
        f"{s['focus_sessions_completed']} focus session(s), {s['total_focus_minutes']} min\n"
        f"  Achievements: {s['achievements_unlocked']}/{s['achievements_total']}"
    )


def cmd_achievements(state: AppState, args: list[str]) -> str:
    unlocked = state.progress.unlocked_ids
    lines = ["Achievements:"]
    for a in state.progress.catalog:
        mark = a.icon if a.id in unlocked else "  "
        lines.append(f"  {mark} {a.name} - {a.description}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add pay rent friday !high", aliases=["a"])
registry.register("list", cmd_list, help_text="List tasks grouped by due date.", aliases=["ls", "l"])
registry.register("next", cmd_next, help_text="Show the most important open task.")
registry.register("done", cmd_done, help_text="Complete a task: /done <n|id> (focus task if omitted).")
registry.register("undo", cmd_undo, help_text="Reopen a completed task: /undo <n|id>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n|id>.")
registry.register("edit", cmd_edit, help_text="Rewrite a task: /edit <n|id> <new text>.")
registry.register("project", cmd_project, help_text="Projects: /project [add|rm|<name>|today|inbox|all].")
registry.register("label", cmd_label, help_text="Labels: /label [add|rm|<name>|all].")
registry.register("tag", cmd_tag, help_text="Toggle a label on a task: /tag <n|id> <label>.")
registry.register("search", cmd_search, help_text="Filter by text: /search <query> (empty clears).")
registry.register("completed", cmd_completed, help_text="Show/hide completed tasks: /completed on|off.")
registry.register("focus", cmd_focus, help_text="Toggle focus mode (one task at a time).", aliases=["f"])
registry.register("skip", cmd_skip, help_text="Focus on a different task.")
registry.register("session", cmd_session, help_text="Focus countdown: /session [start] [min] | status | stop.")
registry.register("stats", cmd_stats, help_text="Show level, XP and streak.")
registry.register("achievements", cmd_achievements, help_text="List achievements.")
