"""
Command line validation of authorization policy files.

    policy-reader config/authorization_rules.yml
    ACCESS_POLICY_FILE=config/authorization_rules.yml policy-reader --json
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from shared.config import get_config
from shared.errors import DSLError
from shared.logging import configure_logging, get_logger

from .reader import DSLReader


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    config = get_config()
    parser = argparse.ArgumentParser(description="Compile an authorization policy and print a summary.")
    parser.add_argument("policy_file", nargs="?", type=Path,
                        default=Path(config.policy_file) if config.policy_file else None,
                        help="Policy file (defaults to ACCESS_POLICY_FILE)")
    parser.add_argument("--log-level", default=config.log_level, help="Log level")
    parser.add_argument("--json", action="store_true", help="Print summary and errors as JSON")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging("policy", args.log_level)
    logger = get_logger("policy.cli")

    if args.policy_file is None:
        print("[policy] no policy file given and ACCESS_POLICY_FILE is not set", file=sys.stderr)
        return 2

    try:
        model = DSLReader.load(args.policy_file).model
    except DSLError as exc:
        logger.warning("Policy rejected", source=str(args.policy_file), code=exc.code)
        if args.json:
            print(exc.to_response().model_dump_json(indent=2))
        else:
            print(f"[policy] {exc.message}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"[policy] cannot read {args.policy_file}: {exc}", file=sys.stderr)
        return 1

    summary = model.summary()
    if args.json:
        print(json.dumps(summary, indent=2))
        return 0

    print(f"{args.policy_file}: {summary['privileges']} privileges, "
          f"{summary['roles']} roles, {summary['rules']} rules")
    for role, grants in summary["grants"].items():
        title = model.role_titles.get(role)
        print(f"  {role}" + (f" ({title})" if title else ""))
        for grant in grants:
            conditions = f", {grant['conditions']} conditions" if grant["conditions"] else ""
            print(f"    {grant['context']}: {', '.join(map(str, grant['privileges']))}{conditions}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
