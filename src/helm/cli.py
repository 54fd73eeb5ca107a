"""
HELM command-line interface.

Usage:
    helm check values.json
    helm evaluate values.json --change "pause nightly backups" --severity low
    helm goal values.json --goal "improve onboarding docs" --priority 6
    helm orchestrate values.json --max-in-progress 2 --admit
"""

import argparse
import json
import logging
import sys
from typing import Any

from helm.errors import ConfigurationError, HelmError
from helm.observability import configure_logging
from helm.orchestrator import OrchestratorConfig
from helm.session import create_session
from helm.values import load_value_model


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_check(args) -> int:
    model = load_value_model(args.values)
    print(f"Value model OK: {args.values}")
    print(f"  core values:     {len(model.values())}")
    print(f"  risk factors:    {len(model.risk_factors())}")
    print(f"  strategic goals: {len(model.goals())}")
    print(f"  fingerprint:     {model.fingerprint}")
    return 0


def cmd_evaluate(args) -> int:
    session = create_session(load_value_model(args.values))
    decision = session.gate.evaluate_behavior_change(
        args.change,
        context=args.context,
        severity=args.severity,
    )
    _print_json(decision.model_dump(mode="json"))
    return 0


def cmd_goal(args) -> int:
    session = create_session(load_value_model(args.values))
    decision = session.gate.filter_goal_through_core(
        args.goal,
        args.priority,
        context=args.context,
    )
    _print_json(decision.model_dump(mode="json"))
    return 0


def cmd_orchestrate(args) -> int:
    config = OrchestratorConfig(max_in_progress=args.max_in_progress)
    session = create_session(load_value_model(args.values), orchestrator_config=config)
    session.bind_logging()
    snapshot = session.orchestrator.orchestrate(args.context)
    if args.admit:
        session.orchestrator.admit_pending()
        snapshot = session.orchestrator.orchestrate(args.context)
    output = snapshot.to_dict()
    output["metrics"] = session.gate.get_metrics().to_dict()
    _print_json(output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="helm",
        description="HELM alignment core - evaluate changes and goals against a value model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate a value model file
  helm check values.json

  # Evaluate a behavior change
  helm evaluate values.json --change "disable audit logging" --severity high

  # Run one orchestration pass and admit up to two tasks
  helm orchestrate values.json --max-in-progress 2 --admit
        """,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Validate a value model file")
    check.add_argument("values", help="Value model JSON file")
    check.set_defaults(func=cmd_check)

    evaluate = sub.add_parser("evaluate", help="Evaluate a behavior change")
    evaluate.add_argument("values", help="Value model JSON file")
    evaluate.add_argument("--change", required=True, help="Proposed change")
    evaluate.add_argument("--severity", default="unspecified", help="low, medium, high")
    evaluate.add_argument("--context", default=None, help="Situational context")
    evaluate.set_defaults(func=cmd_evaluate)

    goal = sub.add_parser("goal", help="Filter a goal through the core")
    goal.add_argument("values", help="Value model JSON file")
    goal.add_argument("--goal", required=True, help="Goal statement")
    goal.add_argument("--priority", type=float, required=True, help="Priority 0-10")
    goal.add_argument("--context", default=None, help="Situational context")
    goal.set_defaults(func=cmd_goal)

    orchestrate = sub.add_parser("orchestrate", help="Run one orchestration pass")
    orchestrate.add_argument("values", help="Value model JSON file")
    orchestrate.add_argument("--max-in-progress", type=int, default=None, help="Admission throttle")
    orchestrate.add_argument("--admit", action="store_true", help="Admit pending tasks")
    orchestrate.add_argument("--context", default=None, help="Situational context")
    orchestrate.set_defaults(func=cmd_orchestrate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        json_format=args.json_logs,
    )

    try:
        return args.func(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except HelmError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
