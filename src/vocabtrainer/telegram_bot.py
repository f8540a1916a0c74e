"""Telegram transport: route every message through the command dispatcher."""

from __future__ import annotations

import logging

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from .commands import KNOWN_COMMANDS, CommandDispatcher

logger = logging.getLogger(__name__)

DISPATCHER_KEY = "dispatcher"


def display_name(update: Update) -> str:
    """Return "First Last" for the sender, or an empty string."""
    user = update.effective_user
    if user is None:
        return ""
    return user.full_name


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Answer one text message or command."""
    message = update.message
    user = update.effective_user
    if message is None or user is None or message.text is None:
        return
    dispatcher: CommandDispatcher = context.bot_data[DISPATCHER_KEY]
    reply = dispatcher.handle(user.id, display_name(update), message.text)
    if reply:
        await message.reply_text(reply, reply_to_message_id=message.message_id)


async def log_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Failed to handle update %s", update, exc_info=context.error)


def build_application(token: str, dispatcher: CommandDispatcher) -> Application:
    """Create the bot application with all handlers registered."""
    app = Application.builder().token(token).build()
    app.bot_data[DISPATCHER_KEY] = dispatcher
    app.add_handler(CommandHandler(list(KNOWN_COMMANDS), handle_message))
    app.add_handler(MessageHandler(filters.TEXT, handle_message))
    app.add_error_handler(log_error)
    return app


def run_bot(token: str, dispatcher: CommandDispatcher) -> None:
    """Poll Telegram until interrupted."""
    app = build_application(token, dispatcher)
    logger.info("Bot is running. Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True)
