"""CLI entrypoint for learning-request screening and research."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from aggregator import generate_path_summary, print_summary
from config import get_settings
from models import Level, LearningRequest
from orchestrator import LearningPathService, build_default_service
from safety import CONTENT_POLICY
from utils import ConfigurationError, configure_package_loggers


def _build_request(args: argparse.Namespace) -> LearningRequest:
    return LearningRequest(
        topic=args.topic,
        description=args.description,
        level=Level(args.level),
        preferred_sources=frozenset(args.prefer or []),
    )


def _add_request_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("topic")
    parser.add_argument("--description", default="")
    parser.add_argument("--level", default=Level.BEGINNER.value, choices=[level.value for level in Level])
    parser.add_argument("--prefer", action="append", help="Preferred source name; repeatable")
    parser.add_argument("--age", type=int, default=None)
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")


def _print_json(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


async def _screen(service: LearningPathService, args: argparse.Namespace) -> int:
    decision = await service.screen(_build_request(args), user_age=args.age)
    _print_json(decision.model_dump(mode="json"))
    return 0 if decision.allowed else 2


async def _research(service: LearningPathService, args: argparse.Namespace) -> int:
    outcome = await service.run(_build_request(args), user_age=args.age, design_stages=args.stages)
    if args.json:
        _print_json(outcome.model_dump(mode="json"))
    else:
        if outcome.research is not None:
            print_summary(outcome.research)
        _print_json(
            {
                "status": outcome.status.value,
                "safety": outcome.safety.model_dump(mode="json", exclude_defaults=True),
                "verification": outcome.verification.model_dump(mode="json") if outcome.verification else None,
                "gaps": [gap.model_dump(mode="json") for gap in outcome.research.gaps] if outcome.research else [],
                "path": generate_path_summary(outcome.path) if outcome.path else None,
            }
        )
    return 2 if outcome.status.value == "blocked" else 0


async def _run(args: argparse.Namespace) -> int:
    if args.command == "policy":
        _print_json(CONTENT_POLICY)
        return 0

    try:
        service = build_default_service(get_settings())
    except ConfigurationError as e:
        logging.getLogger("learnhub").error(f"Invalid configuration: {e}")
        return 1
    try:
        if args.command == "screen":
            return await _screen(service, args)
        return await _research(service, args)
    finally:
        await service.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Learning resource research CLI")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    screen = sub.add_parser("screen", help="Run safety screening only")
    _add_request_args(screen)

    research = sub.add_parser("research", help="Screen, research all sources and verify")
    _add_request_args(research)
    research.add_argument("--stages", action="store_true", help="Also design a staged learning path")

    sub.add_parser("policy", help="Print the published content policy")

    args = parser.parse_args(argv)
    configure_package_loggers(level=logging.DEBUG if args.verbose else logging.INFO)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
