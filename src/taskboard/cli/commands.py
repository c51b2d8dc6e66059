# src/taskboard/cli/commands.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from ..core.state import AppState
from ..pages import (
    DetailPage,
    PageState,
    Redirect,
    build_dashboard_items,
    build_header,
    resolve_dashboard_route,
)

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

SIGN_IN_FIRST = "Please sign in first (/login <email> <name>)."


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /new, ...)."""

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

    def handle(
        self,
        state: AppState,
        line: str,
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

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _render_page(state: AppState, page: DetailPage) -> str:
    detail = page.detail
    if detail is None:
        return "No task open."

    me = state.identity.current_identity()
    deletable = page.thread.deletable_ids(me) if page.thread else set()

    lines = [f"Task {detail.task_id} ({detail.created}):", f"  {detail.text}", "Comments:"]
    if page.show_empty_state:
        lines.append("  No comments found...")
    for c in page.comments:
        mark = " [x]" if c.id in deletable else ""
        lines.append(f"  - {c.author_name}: {c.text} ({c.id}){mark}")
    return "\n".join(lines)


def _open_page(state: AppState) -> DetailPage | None:
    page = state.page
    if page is None or page.state is not PageState.RESOLVED:
        return None
    return page


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    header = build_header(state.identity.current_identity())
    who = header.greeting or "Not signed in"
    dash = "live" if state.dashboard.subscribed else "off"
    page = state.page.task_id if state.page is not None else "-"
    return (
        "Status:\n"
        f"  {who}\n"
        f"  Dashboard: {dash} ({len(state.dashboard.tasks)} tasks)\n"
        f"  Open task: {page}"
    )


def cmd_login(state: AppState, args: list[str]) -> str:
    """/login <email> [name...]"""
    if not args:
        return "Usage: /login <email> [name]"

    identity = state.identity.sign_in("local", email=args[0], name=" ".join(args[1:]))
    if identity is None:
        return "Sign-in failed."

    state.dashboard.subscribe(identity.email)
    return build_header(identity).greeting or ""


def cmd_logout(state: AppState, args: list[str]) -> str:
    state.dashboard.unsubscribe()
    state.identity.sign_out()
    state.page = None
    return "Signed out."


def cmd_new(state: AppState, args: list[str]) -> str:
    """
    /new [--public] <text>  -> register a task (private unless --public)
    """
    route = resolve_dashboard_route(state.identity.current_identity())
    if isinstance(route, Redirect):
        return SIGN_IN_FIRST

    is_public = False
    words: list[str] = []
    for a in args:
        if a in ("-p", "--public"):
            is_public = True
        else:
            words.append(a)

    state.dashboard.draft.text = " ".join(words)
    state.dashboard.draft.is_public = is_public

    task_id = state.dashboard.submit_draft(route.email)
    if task_id:
        return f"Task registered ({'public' if is_public else 'private'}): {task_id}"
    if state.dashboard.draft.text.strip():
        return "Could not save the task. Try again."
    return "Usage: /new [--public] <text>"


def cmd_tasks(state: AppState, args: list[str]) -> str:
    route = resolve_dashboard_route(state.identity.current_identity())
    if isinstance(route, Redirect):
        return SIGN_IN_FIRST

    items = build_dashboard_items(state.dashboard.tasks, state.share)
    if not items:
        return "My tasks: none yet."

    lines = ["My tasks:"]
    for i, item in enumerate(items, start=1):
        tag = "[PUBLIC] " if item.show_public_tag else ""
        lines.append(f"{i}. {tag}{item.task.text} ({item.task.id})")
        if item.detail_path:
            lines.append(f"     open: {item.detail_path}")
    return "\n".join(lines)


def cmd_del(state: AppState, args: list[str]) -> str:
    route = resolve_dashboard_route(state.identity.current_identity())
    if isinstance(route, Redirect):
        return SIGN_IN_FIRST
    if not args:
        return "Usage: /del <task_id>"

    if state.dashboard.delete_task(args[0]):
        return f"Task {args[0]} deleted."
    return f"Could not delete task {args[0]}."


def cmd_share(state: AppState, args: list[str]) -> str:
    route = resolve_dashboard_route(state.identity.current_identity())
    if isinstance(route, Redirect):
        return SIGN_IN_FIRST
    if not args:
        return "Usage: /share <task_id>"

    task_id = args[0]
    item = next(
        (i for i in build_dashboard_items(state.dashboard.tasks, state.share) if i.task.id == task_id),
        None,
    )
    if item is None or item.share_url is None:
        return f"Task {task_id} is not one of your public tasks."

    url = asyncio.run(state.share.share(task_id, state.clipboard))
    return f"Link copied: {url}"


def cmd_open(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /open <task_id>"

    page = DetailPage(
        state.resolver,
        state.comment_store,
        args[0],
        enforce_ownership=bool(getattr(state.settings, "enforce_ownership", True)),
    )
    asyncio.run(page.load())

    if page.state is PageState.DENIED:
        state.page = None
        return "Task not available."

    state.page = page
    return _render_page(state, page)


def cmd_comments(state: AppState, args: list[str]) -> str:
    page = _open_page(state)
    if page is None:
        return "No task open. Use /open <task_id>."
    return _render_page(state, page)


def cmd_comment(state: AppState, args: list[str]) -> str:
    page = _open_page(state)
    if page is None:
        return "No task open. Use /open <task_id>."

    me = state.identity.current_identity()
    if not page.can_comment(me):
        return SIGN_IN_FIRST

    text = " ".join(args)
    page.thread.draft = text
    comment = page.post(me, text)
    if comment is None:
        if not text.strip():
            return "Usage: /comment <text>"
        return "Could not post the comment. Try again."
    return _render_page(state, page)


def cmd_uncomment(state: AppState, args: list[str]) -> str:
    page = _open_page(state)
    if page is None:
        return "No task open. Use /open <task_id>."
    if not args:
        return "Usage: /uncomment <comment_id>"

    if not page.remove(state.identity.current_identity(), args[0]):
        return f"Comment {args[0]} cannot be deleted."
    return _render_page(state, page)


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = state.home_stats.get()
    return f"+{stats.posts} posts  +{stats.comments} comments"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show who is signed in and what is open.")
registry.register("login", cmd_login, help_text="Sign in: /login <email> [name].")
registry.register("logout", cmd_logout, help_text="Sign out.")
registry.register("new", cmd_new, help_text="Register a task: /new [--public] <text>.")
registry.register("tasks", cmd_tasks, help_text="List my tasks (live).", aliases=["dashboard"])
registry.register("del", cmd_del, help_text="Delete one of my tasks: /del <task_id>.")
registry.register("share", cmd_share, help_text="Copy the link of a public task: /share <task_id>.")
registry.register("open", cmd_open, help_text="Open a public task: /open <task_id>.")
registry.register("comments", cmd_comments, help_text="Show the comments of the open task.")
registry.register("comment", cmd_comment, help_text="Comment on the open task: /comment <text>.")
registry.register(
    "uncomment", cmd_uncomment, help_text="Delete one of my comments: /uncomment <comment_id>."
)
registry.register("stats", cmd_stats, help_text="Show total posts and comments.")
