#!/usr/bin/env python3
"""Main entry point for the debate stream console client."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from config.settings import AppConfig, get_default_config
from debate_client import (
    CompletionResult,
    DebateApiClient,
    DebateClientError,
    DebateSessionController,
    Message,
    ScoreBoard,
    SessionListener,
    SessionStatus,
    Speaker,
)
from debate_client.timer import RoundTimer
from debate_client.types import DebateVariant

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """Configure logging for the console client."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class ConsoleListener(SessionListener):
    """Prints finished turns, score changes and errors to stdout."""

    def on_message(self, message: Message) -> None:
        print()
        print(f"[{message.role} - {message.message_type.value} - round {message.round}]")
        print(message.content.strip())

    def on_status_changed(self, status: SessionStatus) -> None:
        print(f"\n*** Session {status.value} ***")

    def on_scores_changed(self, board: ScoreBoard) -> None:
        affirmative = board.total_for(Speaker.AFFIRMATIVE)
        negative = board.total_for(Speaker.NEGATIVE)
        print(f"\nScores - Affirmative: {affirmative:.1f}, Negative: {negative:.1f}")

    def on_timer_tick(self, remaining: int) -> None:
        # Once a minute is plenty for a console
        if remaining % 60 == 0:
            print(f"\n⏱️  {RoundTimer.format_remaining(remaining)} left in this round")

    def on_error(self, message: str) -> None:
        print(f"\n❌ {message}", file=sys.stderr)

    def on_completed(self, result: CompletionResult | None) -> None:
        if result is None:
            return
        print(f"\n🏆 Winner: {result.winner or 'undecided'}")
        for name, value in (result.final_scores or {}).items():
            print(f"   {name}: {value}")
        if result.overall_assessment:
            print(result.overall_assessment)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Follow a live debate from the console")
    parser.add_argument("--topic", type=int, required=True, help="Topic id to debate")
    parser.add_argument("--title", default="", help="Topic title shown in the transcript")
    parser.add_argument("--interactive", action="store_true", help="Argue one side yourself")
    parser.add_argument("--language", choices=["en", "zh"], help="Language requested from the server")
    parser.add_argument("--config", type=Path, help="Path to a JSON config file")
    return parser


async def read_argument(round_number: int) -> str:
    return await asyncio.to_thread(input, f"\nRound {round_number} - your argument: ")


async def run_debate(config: AppConfig, topic_id: int, title: str) -> None:
    listener = ConsoleListener()
    async with DebateApiClient(config.server) as api:
        controller = DebateSessionController(api, config.session, listener)
        try:
            await controller.initialize(topic_id, title)
            await controller.start()

            if controller.variant is DebateVariant.INTERACTIVE:
                while controller.status is SessionStatus.IN_PROGRESS:
                    text = await read_argument(controller.session.current_round)
                    try:
                        await controller.submit_argument(text)
                    except ValueError as e:
                        print(f"⚠️  {e}")
                        continue
                    await controller.wait_for_stream()
            else:
                await controller.wait_for_stream()
                await controller.complete()
        except DebateClientError as e:
            logger.error(f"Debate failed: {e}")
            print(f"\n❌ {e}", file=sys.stderr)
        finally:
            controller.close()

        print()
        print(controller.context.transcript.format_transcript(title))


def main():
    """Main entry point."""
    args = build_parser().parse_args()

    config = AppConfig.load_from_file(args.config) if args.config else get_default_config()
    if args.interactive:
        config.session.variant = "interactive"
    if args.language:
        config.session.language = args.language

    setup_logging(config.system.log_level)

    try:
        asyncio.run(run_debate(config, args.topic, args.title))
    except KeyboardInterrupt:
        print("\n👋 Interrupted")


if __name__ == "__main__":
    main()
