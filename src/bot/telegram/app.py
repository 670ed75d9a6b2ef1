"""Telegram application factory."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from datetime import timedelta
from functools import partial

from telegram.ext import Application, CommandHandler, MessageHandler, filters

from src.agent.session import SessionHandle, create_background_session, create_main_session
from src.bot.dispatcher import MessageDispatcher
from src.bot.lifecycle import previous_shutdown_reason, write_shutdown_state
from src.bot.runtime import Runtime, get_runtime, init_runtime
from src.bot.telegram.handlers import (
    handle_memory,
    handle_message,
    handle_reset,
    handle_start,
    handle_status,
    handle_tasks,
    handle_weeks,
)
from src.config import settings
from src.memory.store import MemoryStore
from src.notifications.telegram_channel import TelegramChannel
from src.tasks.store import TaskStore
from src.tasks.worker import BackgroundWorker
from src.tools.queue_tools import init_queue_tools

logger = logging.getLogger(__name__)

# Seconds to wait for the in-flight reply before the bot disconnects.
SHUTDOWN_GRACE = 30.0


def _build_runtime(app: Application) -> Runtime:
    """Create the sessions, worker and dispatcher and wire them together."""
    channel = TelegramChannel(app.bot)
    tasks = TaskStore.get()
    memory = MemoryStore.get()

    main = SessionHandle(create_main_session)
    background = create_background_session()

    worker = BackgroundWorker(
        tasks,
        background,
        partial(channel.send, settings.telegram_chat_id),
        history_source=main.recent_transcript,
        max_age=timedelta(days=settings.task_max_age_days),
    )
    init_queue_tools(worker)

    dispatcher = MessageDispatcher(main, channel)
    return Runtime(
        main=main,
        background=background,
        dispatcher=dispatcher,
        worker=worker,
        tasks=tasks,
        memory=memory,
        previous_shutdown=previous_shutdown_reason(settings.state_path),
    )


def _on_signal(app: Application, sig: signal.Signals) -> None:
    runtime = get_runtime()
    if runtime.shutdown_signal == "unknown":
        runtime.shutdown_signal = sig.name
    logger.info("Received %s, shutting down...", sig.name)
    app.stop_running()


async def _post_init(app: Application) -> None:
    """Called after the Application is fully initialized (event loop running)."""
    runtime = _build_runtime(app)
    init_runtime(runtime)
    logger.info("Previous shutdown: %s", runtime.previous_shutdown)

    await runtime.worker.start()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _on_signal, app, sig)

    logger.info("Bot running. Authorized chat: %s", settings.telegram_chat_id)


async def _post_stop(app: Application) -> None:
    """Stop taking work while the bot can still deliver the last reply."""
    runtime = get_runtime()
    runtime.dispatcher.stop()
    await runtime.worker.stop()
    try:
        await asyncio.wait_for(runtime.dispatcher.wait_idle(), SHUTDOWN_GRACE)
    except TimeoutError:
        logger.warning("Gave up waiting for the in-flight reply after %.0fs", SHUTDOWN_GRACE)


async def _post_shutdown(app: Application) -> None:
    """Called during graceful shutdown."""
    runtime = get_runtime()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(sig)

    runtime.main.dispose()
    runtime.background.dispose()
    init_queue_tools(None)
    write_shutdown_state(settings.state_path, runtime.shutdown_signal, runtime.uptime_seconds)
    init_runtime(None)


def create_app() -> Application:
    """Build and configure the Telegram application."""
    # Updates are handled one at a time; MessageDispatcher owns the reply queue.
    app = Application.builder().token(settings.telegram_bot_token).build()

    app.add_handler(CommandHandler("start", handle_start))
    app.add_handler(CommandHandler("reset", handle_reset))
    app.add_handler(CommandHandler("tasks", handle_tasks))
    app.add_handler(CommandHandler("memory", handle_memory))
    app.add_handler(CommandHandler("weeks", handle_weeks))
    app.add_handler(CommandHandler("status", handle_status))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    app.post_init = _post_init
    app.post_stop = _post_stop
    app.post_shutdown = _post_shutdown

    return app
