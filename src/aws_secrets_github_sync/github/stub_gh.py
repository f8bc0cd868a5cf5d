"""Deterministic local stand-in for ``gh`` used by integration tests.

State lives in the JSON file named by ``AWS_SECRETS_GITHUB_SYNC_STUB_GH_STATE``::

    {
      "repository": "owner/repo",
      "secrets": {"": {"KEY": "value"}, "production": {}},
      "throttle": {"set": 2},
      "fail": {"remove": "HTTP 404: Not Found"},
      "calls": []
    }

``secrets`` is keyed by environment name, ``""`` being repository level.
``throttle`` counts how many more calls of a subcommand answer with the
secondary rate-limit error; ``fail`` makes a subcommand fail permanently.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

STATE_ENV_VAR = "AWS_SECRETS_GITHUB_SYNC_STUB_GH_STATE"
RATE_LIMIT_MESSAGE = (
    "HTTP 403: You have exceeded a secondary rate limit. "
    "Please wait a few minutes before you try again."
)


def main(argv: list[str] | None = None) -> int:
    """Emulate the handful of ``gh`` subcommands the sync tool calls."""

    parser = argparse.ArgumentParser(prog="gh")
    groups = parser.add_subparsers(dest="group", required=True)

    repo = groups.add_parser("repo").add_subparsers(dest="action", required=True)
    view = repo.add_parser("view")
    view.add_argument("--json", dest="fields", required=True)

    secret = groups.add_parser("secret").add_subparsers(dest="action", required=True)
    for action in ("list", "set", "remove"):
        sub = secret.add_parser(action)
        if action != "list":
            sub.add_argument("name")
        sub.add_argument("--repo", required=True)
        sub.add_argument("--env", default="")

    args = parser.parse_args(argv)
    state_path = _state_path()
    state = _load_state(state_path)
    state.setdefault("calls", []).append(argv if argv is not None else sys.argv[1:])

    try:
        return _dispatch(args, state)
    finally:
        _save_state(state_path, state)


def _dispatch(args: argparse.Namespace, state: dict) -> int:
    if args.group == "repo":
        repository = state.get("repository")
        if not repository:
            print("no git remotes found", file=sys.stderr)
            return 1
        print(json.dumps({"nameWithOwner": repository}))
        return 0

    throttle = state.setdefault("throttle", {})
    remaining = int(throttle.get(args.action, 0))
    if remaining > 0:
        throttle[args.action] = remaining - 1
        print(RATE_LIMIT_MESSAGE, file=sys.stderr)
        return 1

    failure = state.get("fail", {}).get(args.action)
    if failure:
        print(failure, file=sys.stderr)
        return 1

    bucket = state.setdefault("secrets", {}).setdefault(args.env, {})
    if args.action == "list":
        for name in sorted(bucket):
            print(f"{name}\t2026-01-01T00:00:00Z")
        return 0

    if args.action == "set":
        bucket[args.name] = sys.stdin.read()
        print(f"Set Actions secret {args.name} for {args.repo}")
        return 0

    if args.name not in bucket:
        print(f"HTTP 404: Not Found (secret {args.name})", file=sys.stderr)
        return 1
    del bucket[args.name]
    print(f"Removed Actions secret {args.name} from {args.repo}")
    return 0


def _state_path() -> Path:
    raw = os.getenv(STATE_ENV_VAR, "").strip()
    if not raw:
        raise SystemExit(f"{STATE_ENV_VAR} is not set")
    return Path(raw)


def _load_state(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text("utf-8"))
    except json.JSONDecodeError:
        return {}
    if isinstance(payload, dict):
        return payload
    return {}


def _save_state(path: Path, state: dict) -> None:
    path.write_text(json.dumps(state, ensure_ascii=False, sort_keys=True), "utf-8")


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
