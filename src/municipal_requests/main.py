"""Process entrypoint: runs the CLI and turns every outcome into an exit code."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ExitCode(IntEnum):
    """Process exit codes of ``munireq``."""

    SUCCESS = 0
    NOT_FOUND = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run ``munireq`` and return its exit code; never raises."""

    try:
        from municipal_requests.ui.cli import run_cli

        return _as_exit_code(run_cli(argv))
    except SystemExit as exc:
        # argparse exits directly on --help and on usage errors.
        return _as_exit_code(exc.code)
    except Exception as exc:  # noqa: BLE001 - every failure becomes an exit code here.
        code = exit_code_for(exc)
        if code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(f"error: {str(exc).strip() or type(exc).__name__}", file=sys.stderr)
        return int(code)


def console_main() -> None:
    """``munireq`` console script."""

    raise SystemExit(cli_entrypoint())


def exit_code_for(exc: BaseException) -> ExitCode:
    """Config errors anywhere in the cause chain map to ``CONFIG_ERROR``."""

    from municipal_requests.config import ConfigLoadError, ConfigValidationError

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, (ConfigLoadError, ConfigValidationError, OSError)):
            return ExitCode.CONFIG_ERROR
        current = current.__cause__ or (
            None if current.__suppress_context__ else current.__context__
        )
    return ExitCode.INTERNAL_ERROR


def _as_exit_code(raw: object) -> int:
    if raw is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw, int) and raw in {code.value for code in ExitCode}:
        return raw
    if isinstance(raw, str) and raw.strip():
        print(raw.strip(), file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


__all__ = ["ExitCode", "cli_entrypoint", "console_main", "exit_code_for"]
