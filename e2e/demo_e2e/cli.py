from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from demo_e2e.core.config import RunConfig, scenario_file
from demo_e2e.core.errors import ScenarioDefinitionError
from demo_e2e.core.log import setup_logging
from demo_e2e.core.playwright_factory import close_context, create_context
from demo_e2e.core.runner import ScenarioRunner
from demo_e2e.core.scenario_loader import filter_scenarios, load_scenarios

logger = logging.getLogger("demo_e2e")

EXIT_DEFINITION_ERROR = 2


def _add_filters(p: argparse.ArgumentParser) -> None:
    p.add_argument("--scenarios", type=Path, default=None, help="scenario YAML (default: E2E_SCENARIOS or bundled)")
    p.add_argument("-k", dest="keywords", action="append", default=[], help="name substring (repeatable)")
    p.add_argument("--tag", dest="tags", action="append", default=[], help="tag (repeatable)")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="demo-e2e", description="Demo sites e2e runner (YAML + Playwright)")
    ap.add_argument("--log-level", default=None)
    sub = ap.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="run scenarios")
    _add_filters(run)
    run.add_argument("--headed", action="store_true", help="show the browser")
    run.add_argument("--artifacts", type=Path, default=None, help="artifact directory (ARTIFACT_DIR)")
    run.add_argument("--no-trace", action="store_true", help="do not record Playwright traces")
    run.add_argument("--report", type=Path, default=None, help="extra copy of the JSON report")

    ls = sub.add_parser("list", help="list scenarios")
    _add_filters(ls)
    return ap


def _select(args: argparse.Namespace):
    scenarios = load_scenarios(args.scenarios or scenario_file())
    return filter_scenarios(scenarios, args.keywords, args.tags)


def cmd_list(args: argparse.Namespace) -> int:
    for sc in _select(args):
        tags = f" [{', '.join(sc.tags)}]" if sc.tags else ""
        print(f"{sc.name}{tags}: {sc.title or ''} ({len(sc.steps)} steps)")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    config = RunConfig.from_env().with_overrides(
        artifact_dir=args.artifacts,
        headless=False if args.headed else None,
        trace=False if args.no_trace else None,
    )
    scenarios = _select(args)
    if not scenarios:
        logger.warning("no scenarios matched")
        return 0

    bundle = create_context(config)
    try:
        report = ScenarioRunner(config).run(scenarios, bundle.context)
    finally:
        close_context(bundle)

    if args.report:
        report.write_json(args.report)
    print(report.summary())
    return report.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        if args.command == "list":
            return cmd_list(args)
        return cmd_run(args)
    except (ScenarioDefinitionError, FileNotFoundError) as e:
        logger.error("%s", e)
        return EXIT_DEFINITION_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
