"""Telegram command and message handlers."""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from src.bot.chunking import split_message
from src.bot.lifecycle import format_uptime
from src.bot.runtime import get_runtime
from src.bot.telegram.security import is_allowed
from src.config import settings
from src.llm.models import friendly, resolve_model
from src.memory.store import validate_week_id
from src.tasks.models import Task, TaskStatus

logger = logging.getLogger(__name__)

GREETING = "Pigeon ready. Send me a message."

# Longest task description shown by /tasks.
TASK_PREVIEW_LENGTH = 80


async def _reply(update: Update, text: str) -> None:
    """Reply in the chat, split into Telegram-sized messages."""
    for chunk in split_message(text):
        await update.message.reply_text(chunk)


def _format_task(task: Task) -> str:
    description = task.description.replace("\n", " ")
    if len(description) > TASK_PREVIEW_LENGTH:
        description = description[: TASK_PREVIEW_LENGTH - 3] + "..."
    return f"- [{task.id[:8]}] {description}"


async def handle_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start: greet the user."""
    if not is_allowed(update):
        return

    await _reply(update, GREETING)


async def handle_reset(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reset: replace the main session with a fresh one."""
    if not is_allowed(update):
        return

    get_runtime().main.reset()
    await _reply(update, "Session reset. Fresh context.")


async def handle_tasks(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /tasks: list running and pending background work."""
    if not is_allowed(update):
        return

    store = get_runtime().tasks
    running = store.list_tasks(TaskStatus.RUNNING)
    pending = store.list_tasks(TaskStatus.PENDING)
    if not running and not pending:
        await _reply(update, "No pending tasks.")
        return

    lines: list[str] = []
    if running:
        lines.append("Running:")
        lines.extend(_format_task(t) for t in running)
    if pending:
        if lines:
            lines.append("")
        lines.append(f"Pending ({len(pending)}):")
        lines.extend(_format_task(t) for t in pending)
    await _reply(update, "\n".join(lines))


async def handle_memory(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /memory [week]: show the current (or given) week's memory."""
    if not is_allowed(update):
        return

    memory = get_runtime().memory
    if context.args:
        try:
            week_id = validate_week_id(context.args[0])
        except ValueError as exc:
            await _reply(update, str(exc))
            return
    else:
        week_id = memory.current_week_id()

    content = memory.load_week(week_id)
    await _reply(update, content or f"No memory for {week_id} yet.")


async def handle_weeks(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /weeks: list weeks that have memory files."""
    if not is_allowed(update):
        return

    weeks = get_runtime().memory.list_weeks()
    if not weeks:
        await _reply(update, "No memory files yet.")
        return
    await _reply(update, "Available weeks:\n" + "\n".join(weeks))


async def handle_status(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /status: uptime and queue summary."""
    if not is_allowed(update):
        return

    runtime = get_runtime()
    lines = [
        f"Uptime: {format_uptime(runtime.uptime_seconds)}",
        f"Model: {friendly(resolve_model(settings.claude_model))}",
        f"Session messages: {len(runtime.main.current.messages)}",
        f"Queued messages: {runtime.dispatcher.pending}",
        f"Pending tasks: {len(runtime.tasks.list_tasks(TaskStatus.PENDING))}",
        f"Previous shutdown: {runtime.previous_shutdown}",
    ]
    await _reply(update, "\n".join(lines))


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text: hand it to the dispatcher queue."""
    if not is_allowed(update):
        return

    text = update.message.text
    if not text:
        return
    get_runtime().dispatcher.enqueue(update.effective_chat.id, text)
