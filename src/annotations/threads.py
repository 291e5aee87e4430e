# src/annotations/threads.py — v1
"""Group raw comments into threads and render them as markdown."""

from __future__ import annotations

import logging

from designscan.upstream.models import CommentThread, RawComment

logger = logging.getLogger(__name__)

RESOLVED_LABEL = "✅ RESOLVED"
OPEN_LABEL = "💬 OPEN"


def group_comments_into_threads(comments: list[RawComment]) -> list[CommentThread]:
    """Build threads from a flat comment list.

    A comment without ``parent_id`` starts a thread; replies attach to their
    parent's thread in ``created_at`` order. Threads are returned newest
    first by root creation time. Replies to unknown parents are dropped.
    """
    threads: dict[str, CommentThread] = {}
    for comment in comments:
        if not comment.parent_id:
            threads[comment.id] = CommentThread(root=comment)

    for comment in comments:
        if not comment.parent_id:
            continue
        thread = threads.get(comment.parent_id)
        if thread is None:
            logger.debug(
                "Dropping reply %s: parent %s not found", comment.id, comment.parent_id
            )
            continue
        thread.replies.append(comment)

    for thread in threads.values():
        thread.replies.sort(key=lambda c: c.created_at)

    return sorted(threads.values(), key=lambda t: t.root.created_at, reverse=True)


def format_thread(thread: CommentThread) -> str:
    """Render one thread as a markdown bullet with indented replies.

    A node-anchored root shows its offset within the node next to the status.
    """
    status = RESOLVED_LABEL if thread.is_resolved else OPEN_LABEL
    offset = thread.root.anchor_offset
    if offset is not None:
        status += f", offset ({offset[0]:.0f}, {offset[1]:.0f})"
    lines = [f"- **@{_handle(thread.root)}** ({status}): {thread.root.message}"]
    for reply in thread.replies:
        lines.append(f"  - **@{_handle(reply)}**: {reply.message}")
    return "\n".join(lines)


def _handle(comment: RawComment) -> str:
    return comment.author or "unknown"
