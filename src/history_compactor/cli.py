"""Command-line interface for history compaction."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .agent_client import AgentClient
from .config import AppConfig, load_config
from .context import (
    HistoryCompactor,
    HistorySummarizer,
    TokenCounter,
    partition_history,
    split_recent,
)
from .runner import ConversationRunner, RunnerConfig
from .transcripts import get_exporter, load_transcript

LOGGER = logging.getLogger("history_compactor.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Conversation history compactor")
    parser.add_argument("--config", default=None, help="YAML config file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    compact_parser = subparsers.add_parser("compact", help="Compact a transcript once")
    compact_parser.add_argument("input", help="Transcript (.json, .yaml, .yml)")
    compact_parser.add_argument("-o", "--output", default=None, help="Output transcript path")
    compact_parser.add_argument("--trigger-budget", type=int, default=None, help="Compact above this many tokens")
    compact_parser.add_argument("--recent-budget", type=int, default=None, help="Tokens of recent turns kept verbatim")

    inspect_parser = subparsers.add_parser("inspect", help="Show token counts and block layout")
    inspect_parser.add_argument("input", help="Transcript (.json, .yaml, .yml)")
    inspect_parser.add_argument("--trigger-budget", type=int, default=None, help="Compact above this many tokens")
    inspect_parser.add_argument("--recent-budget", type=int, default=None, help="Tokens of recent turns kept verbatim")

    run_parser = subparsers.add_parser("run", help="Continue a transcript with the agent")
    run_parser.add_argument("input", help="Transcript (.json, .yaml, .yml)")
    run_parser.add_argument("-o", "--output", default=None, help="Output transcript path")
    run_parser.add_argument("--max-iterations", type=int, default=30, help="Model calls per run")

    return parser


def _apply_budgets(config: AppConfig, args: argparse.Namespace) -> None:
    if getattr(args, "trigger_budget", None) is not None:
        config.compaction.trigger_budget = args.trigger_budget
    if getattr(args, "recent_budget", None) is not None:
        config.compaction.recent_budget = args.recent_budget


def _build_compactor(config: AppConfig) -> HistoryCompactor:
    agent = AgentClient(
        base_url=config.agent.base_url,
        api_key=config.agent.api_key,
        model=config.agent.model,
        timeout=config.agent.timeout,
    )
    summarizer = HistorySummarizer(
        agent,
        system_prompt=config.compaction.system_prompt,
        max_tokens=config.compaction.summary_max_tokens,
        temperature=config.compaction.summary_temperature,
    )
    return HistoryCompactor(
        summarizer=summarizer,
        counter=TokenCounter(encoding=config.compaction.encoding).count_each,
        trigger_budget=config.compaction.trigger_budget,
        recent_budget=config.compaction.recent_budget,
    )


def _output_path(args: argparse.Namespace) -> Path:
    if args.output:
        return Path(args.output)
    source = Path(args.input)
    return source.with_name(f"{source.stem}.compacted{source.suffix}")


def compact(args: argparse.Namespace, config: AppConfig) -> None:
    messages = load_transcript(Path(args.input))
    compactor = _build_compactor(config)
    result = compactor.compact_with_result(messages)
    output = _output_path(args)
    count = get_exporter(output).export(result.messages, output)
    if result.compacted:
        LOGGER.info(
            "Compacted %d -> %d messages (%d older blocks summarized), wrote %s",
            len(messages),
            count,
            result.older_blocks,
            output,
        )
    else:
        LOGGER.info("No compaction needed (%d tokens), wrote %s", result.initial_tokens, output)


def inspect(args: argparse.Namespace, config: AppConfig) -> None:
    messages = load_transcript(Path(args.input))
    # budgets are read back from the compactor so defaults apply the same way
    compactor = _build_compactor(config)
    tokens = compactor.count(messages)
    total = sum(tokens)
    partition = partition_history(messages, tokens)
    older, recent = split_recent(partition.turns, compactor.recent_budget)

    print(f"messages: {len(messages)}")
    print(f"tokens: {total} (trigger {compactor.trigger_budget})")
    print(f"would compact: {bool(messages) and total > compactor.trigger_budget}")
    print(f"system: {len(partition.system)} msg, {partition.system.tokens} tokens")
    print(f"user: {len(partition.user)} msg, {partition.user.tokens} tokens")
    print(f"summary: {len(partition.summary)} msg, {partition.summary.tokens} tokens")
    for label, blocks in (("older", older), ("recent", recent)):
        print(f"{label}: {len(blocks)} blocks, {sum(b.tokens for b in blocks)} tokens")
        for block in blocks:
            roles = ",".join(m.role.value for m in block.messages)
            print(f"  [{roles}] {block.tokens}")


def run(args: argparse.Namespace, config: AppConfig) -> None:
    messages = load_transcript(Path(args.input))
    runner_config = RunnerConfig(
        agent_url=config.agent.base_url,
        api_key=config.agent.api_key,
        model=config.agent.model,
        temperature=config.agent.temperature,
        max_tokens=config.agent.max_tokens,
        timeout=config.agent.timeout,
        max_iterations=args.max_iterations,
        trigger_budget=config.compaction.trigger_budget,
        recent_budget=config.compaction.recent_budget,
        encoding=config.compaction.encoding,
        summary_max_tokens=config.compaction.summary_max_tokens,
        summary_temperature=config.compaction.summary_temperature,
        summary_prompt=config.compaction.system_prompt,
    )
    result = ConversationRunner(runner_config).run(messages)
    output = _output_path(args)
    get_exporter(output).export(result.messages, output)
    LOGGER.info("Wrote %d messages to %s", len(result.messages), output)
    if result.error:
        LOGGER.error("Run aborted: %s", result.error)
        sys.exit(1)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    parser = build_parser()
    args = parser.parse_args()
    config = load_config(Path(args.config) if args.config else None)
    _apply_budgets(config, args)

    if args.command == "compact":
        compact(args, config)
    elif args.command == "inspect":
        inspect(args, config)
    elif args.command == "run":
        run(args, config)
    else:
        parser.error(f"Unknown command {args.command}")


if __name__ == "__main__":
    main()
