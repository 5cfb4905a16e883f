# psuctl/cli/main.py
from __future__ import annotations

from typing import Optional

from psuctl.core.errors import PsuError

from psuctl.cli.args import parse_args
from psuctl.cli.commands import (
    cmd_error,
    cmd_idn,
    cmd_measure,
    cmd_profiles,
    cmd_raw,
    cmd_set,
    cmd_status,
)


def main(argv: Optional[list[str]] = None) -> int:
    try:
        args = parse_args(argv)

        if args.cmd == "profiles":
            return cmd_profiles()
        if args.cmd == "idn":
            return cmd_idn(args)
        if args.cmd == "status":
            return cmd_status(args)
        if args.cmd == "measure":
            return cmd_measure(args)
        if args.cmd == "error":
            return cmd_error(args)
        if args.cmd == "set":
            return cmd_set(args)
        if args.cmd == "raw":
            return cmd_raw(args)

        return 2
    except PsuError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
