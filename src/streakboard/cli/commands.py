# src/streakboard/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import cast

from ..core.errors import BackendError, DocumentError, friendly_backend_error_message
from ..core.state import AppState
from ..tracker import api
from ..tracker.models import Category
from ..tracker.rules import is_completed_today, local_now
from ..tracker.views import (
    HabitItem,
    Stats,
    TaskItem,
    category_view,
    habits_view,
    reminders_view,
    today_view,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

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

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Expected failures (datastore errors, bad input, unknown ids) become replies.
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

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return await h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return await h2(state, args)
        except BackendError as e:
            logger.warning("/%s failed: %s", name, e)
            return friendly_backend_error_message(e)
        except DocumentError as e:
            return f"Error importing data. Please check the file format. ({e})"
        except (ValueError, LookupError) as e:
            return str(e)
        except OSError as e:
            return f"File error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----

def _pop_flag(args: list[str], flag: str) -> bool:
    if flag in args:
        args.remove(flag)
        return True
    return False


def _pop_option(args: list[str], option: str) -> str | None:
    if option not in args:
        return None
    i = args.index(option)
    if i + 1 >= len(args):
        raise ValueError(f"{option} needs a value.")
    value = args[i + 1]
    del args[i : i + 2]
    return value


def _parse_id(args: list[str], usage: str) -> int:
    if not args:
        raise ValueError(f"Usage: {usage}")
    try:
        return int(args[0])
    except ValueError:
        raise ValueError(f"Not an id: {args[0]!r}. Usage: {usage}") from None


def _parse_when(raw: str) -> datetime:
    try:
        when = datetime.fromisoformat(raw)
    except ValueError:
        raise ValueError(f"Invalid time {raw!r}. Use YYYY-MM-DDTHH:MM.") from None
    return when if when.tzinfo is not None else when.astimezone()


def _needs_confirmation(state: AppState, args: list[str]) -> bool:
    confirmed = _pop_flag(args, "--yes")
    return bool(getattr(state.settings, "confirm_delete", True)) and not confirmed


# ---- rendering ----

def _render_tasks(items: list[TaskItem], *, show_category: bool) -> str:
    if not items:
        return "No tasks yet."
    lines = []
    for it in items:
        box = "[x]" if it.completed_today else "[ ]"
        suffix = ""
        if show_category:
            suffix = f"  ({it.category.value}{' daily' if it.is_daily_tracking else ''})"
        elif it.is_daily_tracking:
            suffix = f"  (daily tracking - {it.completed_days} days completed)"
        lines.append(f"{it.id:>4} {box} {it.text}{suffix}")
    return "\n".join(lines)


def _render_habits(items: list[HabitItem]) -> str:
    if not items:
        return "No habits yet."
    return "\n".join(
        f"{h.id:>4} {'[x]' if h.completed_today else '[ ]'} {h.text}  ({h.streak} day streak)" for h in items
    )


def _render_summary(total: int, completed: int) -> str:
    return f"Total: {total} | Completed: {completed} | Pending: {total - completed}"


def _render_stats(stats: Stats) -> str:
    return f"Today: {stats.completed_today}/{stats.total_today} done | Streak: {stats.streak} days"


# ---- commands ----

async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_today(state: AppState, args: list[str]) -> str:
    now = local_now()
    stats = await api.refresh_stats(state, now)
    header = now.strftime("%A, %B %d, %Y")
    return f"{header}\n{_render_tasks(today_view(state.data, now.date()), show_category=True)}\n{_render_stats(stats)}"


async def cmd_list(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /list today|fullweek|fullmonth|weekdays|habits"
    now = local_now()
    if args[0].lower() == "habits":
        habits = habits_view(state.data, now)
        done = sum(1 for h in habits if h.completed_today)
        return f"habits:\n{_render_habits(habits)}\n{_render_summary(len(habits), done)}"

    category = Category.parse(args[0])
    items = category_view(state.data, category, now.date())
    done = sum(1 for it in items if it.completed_today)
    return f"{category.value}:\n{_render_tasks(items, show_category=False)}\n{_render_summary(len(items), done)}"


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <category> [--daily] [--at HH:MM] <text>
    """
    args = list(args)
    daily = _pop_flag(args, "--daily")
    at = _pop_option(args, "--at")
    if len(args) < 2:
        return "Usage: /add today|fullweek|fullmonth|weekdays [--daily] [--at HH:MM] <text>"
    task = await api.add_task(state, args[0], " ".join(args[1:]), time=at, daily_tracking=daily)
    expires = task.expires_at.strftime("%a %b %d %H:%M") if task.expires_at else "never"
    return f"Added task #{task.id}: {task.text} (expires {expires})"


async def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args, "/done <task id>")
    now = local_now()
    task = await api.toggle_task(state, task_id, now)
    stats = await api.refresh_stats(state, now)
    done = is_completed_today(task, now.date())
    return f"Task #{task.id} marked {'done' if done else 'not done'}. {_render_stats(stats)}"


async def cmd_del(state: AppState, args: list[str]) -> str:
    args = list(args)
    if _needs_confirmation(state, args):
        return "Are you sure you want to delete this item? Repeat with --yes to confirm."
    task_id = _parse_id(args, "/del <task id> [--yes]")
    await api.delete_task(state, task_id)
    return f"Deleted task #{task_id}."


async def cmd_clear(state: AppState, args: list[str]) -> str:
    args = list(args)
    if _needs_confirmation(state, args):
        return "Are you sure you want to clear all completed tasks? Repeat with --yes to confirm."
    n = await api.clear_completed(state)
    return f"Cleared {n} completed task(s)."


async def cmd_habit(state: AppState, args: list[str]) -> str:
    """
    /habit add [--at HH:MM] <text>
    /habit done <id>
    /habit del <id> [--yes]
    """
    args = list(args)
    if not args:
        return "Usage: /habit add [--at HH:MM] <text> | /habit done <id> | /habit del <id>"

    sub, rest = args[0].lower(), args[1:]

    if sub == "add":
        at = _pop_option(rest, "--at")
        habit = await api.add_habit(state, " ".join(rest), time=at)
        return f"Added habit #{habit.id}: {habit.text}"

    if sub in ("done", "toggle"):
        habit = await api.toggle_habit(state, _parse_id(rest, "/habit done <id>"))
        return f"Habit #{habit.id}: {habit.streak} day streak."

    if sub in ("del", "delete"):
        if _needs_confirmation(state, rest):
            return "Are you sure you want to delete this item? Repeat with --yes to confirm."
        habit_id = _parse_id(rest, "/habit del <id> [--yes]")
        await api.delete_habit(state, habit_id)
        return f"Deleted habit #{habit_id}."

    return "Unknown /habit subcommand. Use add, done or del."


async def cmd_habits(state: AppState, args: list[str]) -> str:
    return _render_habits(habits_view(state.data, local_now()))


async def cmd_remind(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Please enter both reminder text and time: /remind YYYY-MM-DDTHH:MM <text>"
    reminder = await api.add_reminder(state, " ".join(args[1:]), _parse_when(args[0]))
    return f"Reminder #{reminder.id} set for {reminder.time.strftime('%Y-%m-%d %H:%M')}."


async def cmd_reminders(state: AppState, args: list[str]) -> str:
    items = reminders_view(state.data, local_now())
    if not items:
        return "No reminders set."
    return "\n".join(
        f"{r.id:>4} {r.time.strftime('%Y-%m-%d %H:%M')}{' (overdue)' if r.overdue else ''}  {r.text}" for r in items
    )


async def cmd_unremind(state: AppState, args: list[str]) -> str:
    reminder_id = _parse_id(args, "/unremind <id>")
    await api.delete_reminder(state, reminder_id)
    return f"Deleted reminder #{reminder_id}."


async def cmd_stats(state: AppState, args: list[str]) -> str:
    return _render_stats(await api.refresh_stats(state))


async def cmd_export(state: AppState, args: list[str]) -> str:
    path = args[0] if args else api.default_export_name(local_now().date())
    out = api.write_export(state, path)
    return f"Exported to: {out}"


async def cmd_import(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    args = list(args)
    confirmed = _pop_flag(args, "--yes")
    if not args:
        return "Usage: /import <file> [--yes]"
    document = api.read_import(args[0])
    if not api.import_document(state, document, confirmed=confirmed):
        return "This will replace all current data. Repeat with --yes to confirm."
    if emit is not None:
        emit("Data imported successfully!")
    stats = await api.refresh_stats(state)
    return _render_stats(stats)


async def cmd_reload(state: AppState, args: list[str]) -> str:
    online = await api.load_all(state)
    removed = await api.remove_expired_tasks(state)
    source = "datastore" if online else "local snapshot (datastore unreachable)"
    return f"Reloaded from {source}; {removed} expired task(s) removed."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("today", cmd_today, help_text="Tasks due today and daily stats.")
registry.register("list", cmd_list, help_text="List one category with totals: /list today|fullweek|fullmonth|weekdays|habits.")
registry.register("add", cmd_add, help_text="Add a task: /add <category> [--daily] [--at HH:MM] <text>.")
registry.register("done", cmd_done, help_text="Toggle a task for today: /done <id>.", aliases=["toggle"])
registry.register("del", cmd_del, help_text="Delete a task: /del <id> [--yes].")
registry.register("clear", cmd_clear, help_text="Delete all completed tasks: /clear [--yes].")
registry.register("habit", cmd_habit, help_text="Habits: /habit add|done|del ...")
registry.register("habits", cmd_habits, help_text="List habits with streaks.")
registry.register("remind", cmd_remind, help_text="Add a reminder: /remind YYYY-MM-DDTHH:MM <text>.")
registry.register("reminders", cmd_reminders, help_text="List active reminders.")
registry.register("unremind", cmd_unremind, help_text="Delete a reminder: /unremind <id>.")
registry.register("stats", cmd_stats, help_text="Completed today / total today / overall streak.")
registry.register("export", cmd_export, help_text="Export all data to JSON: /export [path].")
registry.register("import", cmd_import, help_text="Replace all data from JSON: /import <file> [--yes].")
registry.register("reload", cmd_reload, help_text="Reload everything from the datastore.")
