"""Partitioning of a message history into blocks that move together."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from history_compactor.messages import Message, Role

# Marks an assistant message as a generated history summary.
SUMMARY_FLAG = "_agent_middleware_summary_message"


@dataclass
class Block:
    """Contiguous messages plus their summed token count."""

    messages: list[Message] = field(default_factory=list)
    tokens: int = 0

    def add(self, message: Message, tokens: int) -> None:
        self.messages.append(message)
        self.tokens += tokens

    def __len__(self) -> int:
        return len(self.messages)


@dataclass
class Partition:
    """History split into its leading blocks and the remaining turn blocks.

    Structure:
    ┌──────────────────────────────────────────────┐
    │ system: leading system message (0 or 1)      │
    ├──────────────────────────────────────────────┤
    │ user: run of user messages after system      │
    ├──────────────────────────────────────────────┤
    │ summary: flagged assistant message (0 or 1)  │
    ├──────────────────────────────────────────────┤
    │ turns: single messages or tool-call pairings │
    └──────────────────────────────────────────────┘
    """

    system: Block
    user: Block
    summary: Block
    turns: list[Block]


def partition_history(
    messages: Sequence[Optional[Message]], tokens: Sequence[int]
) -> Partition:
    """
    Partition messages into system, user, summary and turn blocks.

    Token counts come from the parallel ``tokens`` array and are never
    recomputed. ``None`` entries are skipped.

    Args:
        messages: Full ordered history.
        tokens: Per-message token counts, same length as messages.

    Returns:
        Partition covering every non-None message exactly once, in order.
    """
    n = len(messages)
    idx = 0

    system = Block()
    if idx < n and messages[idx] is not None and messages[idx].role is Role.SYSTEM:
        system.add(messages[idx], tokens[idx])
        idx += 1

    user = Block()
    while idx < n:
        msg = messages[idx]
        if msg is None:
            idx += 1
            continue
        if msg.role is not Role.USER:
            break
        user.add(msg, tokens[idx])
        idx += 1

    summary = Block()
    if idx < n:
        msg = messages[idx]
        if (
            msg is not None
            and msg.role is Role.ASSISTANT
            and msg.has_flag(SUMMARY_FLAG)
        ):
            summary.add(msg, tokens[idx])
            idx += 1

    turns: list[Block] = []
    while idx < n:
        msg = messages[idx]
        if msg is None:
            idx += 1
            continue

        block = Block()
        block.add(msg, tokens[idx])
        idx += 1

        if msg.role is Role.ASSISTANT and msg.tool_calls:
            call_ids = {call.id for call in msg.tool_calls}
            while idx < n:
                nxt = messages[idx]
                if nxt is None or nxt.role is not Role.TOOL:
                    break
                # Unattributed responses join the block without ending the scan
                if nxt.tool_call_id and nxt.tool_call_id not in call_ids:
                    break
                block.add(nxt, tokens[idx])
                idx += 1

        turns.append(block)

    return Partition(system=system, user=user, summary=summary, turns=turns)


def split_recent(
    turns: Sequence[Block], recent_budget: int
) -> tuple[list[Block], list[Block]]:
    """
    Split turn blocks into (older, recent) by a newest-first token budget.

    Blocks are taken from the newest end while the running total stays
    within ``recent_budget``. The first block that would exceed it, and
    everything older, is returned as older, so recent is always a
    contiguous suffix even when a smaller older block would still fit.

    Returns:
        Tuple of (older blocks, recent blocks), both in original order.
    """
    used = 0
    cut = len(turns)
    for i in range(len(turns) - 1, -1, -1):
        if used + turns[i].tokens > recent_budget:
            break
        used += turns[i].tokens
        cut = i
    return list(turns[:cut]), list(turns[cut:])
