"""Command-line interface router for municipal-requests."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

from municipal_requests.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from municipal_requests.domain.ids import generate_ulid
from municipal_requests.domain.models import ServiceRequest
from municipal_requests.main import ExitCode
from municipal_requests.observability.logging import (
    correlation_scope,
    setup_logging,
    shutdown_logging,
)
from municipal_requests.services import RequestIndexStore, seed_if_empty
from municipal_requests.structures import CategoryNode, DepotGraph, prim
from municipal_requests.ui.render import CLIRenderer, create_renderer

_LOGGER = logging.getLogger(__name__)

_REQUEST_HEADERS: tuple[str, ...] = (
    "Ticket",
    "Created",
    "Category",
    "Location",
    "Priority",
    "Status",
)


@dataclass(slots=True, eq=False)
class CLIError(RuntimeError):
    """
    Typed CLI failure with an explicit process exit code.

    Not frozen: leaving a ``contextmanager`` scope reassigns ``__traceback__``.
    """

    message: str
    exit_code: int = int(ExitCode.NOT_FOUND)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="munireq",
        description=(
            "municipal-requests: query an in-memory index of municipal service requests.\n\n"
            "Common workflows:\n"
            "  munireq list                 All requests in submission order\n"
            "  munireq find SR-2025-0001    Look up one request by ticket\n"
            "  munireq urgent -n 3          Most urgent requests first\n"
            "  munireq depots mst           Minimum spanning tree of the depot network\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./municipal.toml if present).",
    )
    common.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=None,
        metavar="SECTION.FIELD=VALUE",
        help="Override one config field for this run (repeatable).",
    )
    common.add_argument(
        "--no-seed",
        action="store_true",
        default=False,
        help="Start with an empty store instead of the packaged sample requests.",
    )
    common.add_argument("--json", action="store_true", default=False, help="Emit JSON output")
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log index events at DEBUG level to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # list ----------------------------------------------------------------
    list_parser = subparsers.add_parser(
        "list",
        parents=[common],
        help="List every request in submission order",
    )
    list_parser.set_defaults(handler=_cmd_list)

    # find ----------------------------------------------------------------
    find_parser = subparsers.add_parser(
        "find",
        parents=[common],
        help="Show one request by ticket number",
        description=(
            "Look up a request through the ticket index.\n\n"
            "Examples:\n"
            "  munireq find SR-2025-0004\n"
            "  munireq find SR-2025-0004 --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    find_parser.add_argument("ticket", help="Ticket number, e.g. SR-2025-0001")
    find_parser.set_defaults(handler=_cmd_find)

    # urgent --------------------------------------------------------------
    urgent_parser = subparsers.add_parser(
        "urgent",
        parents=[common],
        help="Show the most urgent requests",
        description=(
            "Rank requests by priority, newest first within a priority.\n"
            "The default count comes from store.top_urgent_limit.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    urgent_parser.add_argument(
        "-n",
        "--count",
        type=_positive_int,
        default=None,
        help="Number of requests to show.",
    )
    urgent_parser.set_defaults(handler=_cmd_urgent)

    # by-location ---------------------------------------------------------
    location_parser = subparsers.add_parser(
        "by-location",
        parents=[common],
        help="List requests ordered by location",
    )
    location_parser.set_defaults(handler=_cmd_by_location)

    # by-created ----------------------------------------------------------
    created_parser = subparsers.add_parser(
        "by-created",
        parents=[common],
        help="List requests ordered by creation time",
        description=(
            "List requests by creation time, optionally within an inclusive range.\n"
            "Bounds are ISO-8601 dates or datetimes; naive values are read as UTC and\n"
            "a date-only --until covers that whole day.\n\n"
            "Examples:\n"
            "  munireq by-created --since 2025-01-01\n"
            "  munireq by-created --since 2025-01-01T08:00Z --until 2025-01-02\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    created_parser.add_argument("--since", default=None, help="Inclusive lower bound")
    created_parser.add_argument("--until", default=None, help="Inclusive upper bound")
    created_parser.set_defaults(handler=_cmd_by_created)

    # categories ----------------------------------------------------------
    categories_parser = subparsers.add_parser(
        "categories",
        parents=[common],
        help="Show the category taxonomy",
    )
    categories_parser.set_defaults(handler=_cmd_categories)

    # depots --------------------------------------------------------------
    depots_parser = subparsers.add_parser(
        "depots",
        parents=[common],
        help="Traverse the depot network or build its minimum spanning tree",
        description=(
            "Walk the depot network breadth-first or depth-first, or compute the\n"
            "minimum spanning tree with Prim's algorithm.\n"
            "The default start depot comes from depots.mst_start.\n\n"
            "Examples:\n"
            "  munireq depots bfs\n"
            "  munireq depots dfs --start 'Athlone Depot'\n"
            "  munireq depots mst --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    depots_parser.add_argument("traversal", choices=("bfs", "dfs", "mst"))
    depots_parser.add_argument("--start", default=None, help="Start depot name")
    depots_parser.set_defaults(handler=_cmd_depots)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
        description=(
            "Display the effective config after merging defaults, file, and env.\n\n"
            "Examples:\n"
            "  munireq config\n"
            "  MUNIREQ_STORE_TOP_URGENT_LIMIT=3 munireq config --json\n"
            "  munireq config --set store.top_urgent_limit=3\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    try:
        config = _load_effective_config(namespace)
        handle = setup_logging(
            config["observability"],
            session_id=generate_ulid(),
            level="DEBUG" if _flag(namespace, "verbose") else None,
        )
        try:
            with correlation_scope(command=namespace.command):
                _LOGGER.debug(
                    "cli_command_started", extra={"json_output": _flag(namespace, "json")}
                )
                result = handler(namespace, config)
        finally:
            shutdown_logging(handle)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_list(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    store = _open_store(args, config)
    return _emit_requests(args, "list", store.get_all())


def _cmd_find(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    store = _open_store(args, config)
    ticket = _require_str(args.ticket, "ticket")
    found, request = store.try_find_by_ticket(ticket)
    if not found or request is None:
        raise CLIError(f"no request with ticket {ticket!r}", exit_code=int(ExitCode.NOT_FOUND))

    if _flag(args, "json"):
        _emit_json({"command": "find", "request": request.to_dict()})
        return int(ExitCode.SUCCESS)

    renderer = _get_renderer(args)
    renderer.heading(request.ticket_number)
    renderer.kv("Category", f"{request.category} / {request.sub_category}")
    renderer.kv("Location", request.location or "-")
    renderer.kv("Priority", request.priority.label)
    renderer.kv("Status", str(request.status))
    renderer.kv("Created", _display_time(request.created_at))
    renderer.kv("Description", request.description)
    if request.history:
        renderer.section("History:")
        renderer.items(request.history)
    return int(ExitCode.SUCCESS)


def _cmd_urgent(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    store = _open_store(args, config)
    count = args.count if args.count is not None else int(config["store"]["top_urgent_limit"])
    return _emit_requests(args, "urgent", store.get_top_urgent(count))


def _cmd_by_location(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    store = _open_store(args, config)
    return _emit_requests(args, "by-location", tuple(store.iter_by_location()))


def _cmd_by_created(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    since = _parse_bound(args.since, "since", end_of_day=False)
    until = _parse_bound(args.until, "until", end_of_day=True)
    if since is not None and until is not None and since > until:
        raise CLIError(
            "--since must not be later than --until", exit_code=int(ExitCode.CONFIG_ERROR)
        )

    store = _open_store(args, config)
    return _emit_requests(args, "by-created", tuple(store.iter_by_created(since, until)))


def _cmd_categories(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    store = _open_store(args, config)
    root = store.category_taxonomy

    if _flag(args, "json"):
        _emit_json({"command": "categories", "taxonomy": _taxonomy_payload(root)})
        return int(ExitCode.SUCCESS)

    renderer = _get_renderer(args)
    for depth, node in root.walk():
        if depth == 0:
            renderer.heading(node.label)
            continue
        renderer.text(f"{'  ' * depth}{node.label}")
    return int(ExitCode.SUCCESS)


def _cmd_depots(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    store = _open_store(args, config)
    graph = store.depot_graph
    start_name = _optional_str(args.start) or str(config["depots"]["mst_start"])
    start = _resolve_depot(graph, start_name)

    if args.traversal == "mst":
        return _emit_spanning_tree(args, graph, start)

    order = list(graph.bfs(start) if args.traversal == "bfs" else graph.dfs(start))
    if _flag(args, "json"):
        _emit_json(
            {
                "command": "depots",
                "traversal": args.traversal,
                "start": graph.name_of(start),
                "order": order,
            }
        )
        return int(ExitCode.SUCCESS)

    renderer = _get_renderer(args)
    renderer.heading(f"{args.traversal.upper()} from {graph.name_of(start)}")
    renderer.text(" -> ".join(order))
    return int(ExitCode.SUCCESS)


def _cmd_config(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    if _flag(args, "json"):
        _emit_json({"command": "config", "config": json.loads(dump_effective_config(config))})
        return int(ExitCode.SUCCESS)

    renderer = _get_renderer(args)
    renderer.text(json.dumps(config, indent=2, sort_keys=True, ensure_ascii=False))
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Helpers: output
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    """Create a CLI renderer from the parsed namespace."""

    return create_renderer(no_color=_flag(args, "no_color"), verbose=_flag(args, "verbose"))


def _emit_requests(
    args: argparse.Namespace, command: str, requests: Sequence[ServiceRequest]
) -> int:
    if _flag(args, "json"):
        _emit_json({"command": command, "requests": [request.to_dict() for request in requests]})
        return int(ExitCode.SUCCESS)

    renderer = _get_renderer(args)
    if not requests:
        renderer.text("No requests.")
        return int(ExitCode.SUCCESS)
    renderer.table(_REQUEST_HEADERS, [_request_row(request) for request in requests])
    return int(ExitCode.SUCCESS)


def _emit_spanning_tree(args: argparse.Namespace, graph: DepotGraph, start: int) -> int:
    tree = prim(graph, start)
    edges = [
        {
            "source": graph.name_of(edge.source),
            "target": graph.name_of(edge.target),
            "weight": edge.weight,
        }
        for edge in tree.edges
    ]
    unreached = [graph.name_of(vertex) for vertex in tree.unreached]

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "depots",
                "traversal": "mst",
                "start": graph.name_of(start),
                "edges": edges,
                "total_weight": tree.total_weight,
                "unreached": unreached,
            }
        )
        return int(ExitCode.SUCCESS)

    renderer = _get_renderer(args)
    renderer.heading(f"Minimum spanning tree from {graph.name_of(start)}")
    renderer.table(
        ("From", "To", "Distance (km)"),
        [(edge["source"], edge["target"], f"{edge['weight']:g}") for edge in edges],
    )
    renderer.kv("Total distance (km)", f"{tree.total_weight:g}")
    if unreached:
        renderer.warning(f"unreachable depots: {', '.join(unreached)}")
    return int(ExitCode.SUCCESS)


def _request_row(request: ServiceRequest) -> tuple[str, ...]:
    return (
        request.ticket_number,
        _display_time(request.created_at),
        f"{request.category} / {request.sub_category}",
        request.location or "-",
        request.priority.label,
        str(request.status),
    )


def _display_time(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y-%m-%d %H:%M UTC")


def _taxonomy_payload(node: CategoryNode) -> dict[str, object]:
    return {
        "label": node.label,
        "children": [_taxonomy_payload(child) for child in node.children],
    }


# ---------------------------------------------------------------------------
# Helpers: config, store, argument parsing
# ---------------------------------------------------------------------------


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    config_path = _optional_str(getattr(args, "config_path", None))
    overrides = _parse_overrides(getattr(args, "overrides", None) or ())
    try:
        return load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=int(ExitCode.CONFIG_ERROR)) from exc


def _parse_overrides(assignments: Sequence[str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for assignment in assignments:
        key, separator, value = assignment.partition("=")
        if not separator or "." not in key.strip():
            raise CLIError(
                f"invalid --set {assignment!r}: expected SECTION.FIELD=VALUE",
                exit_code=int(ExitCode.CONFIG_ERROR),
            )
        overrides[key.strip()] = value
    return overrides


def _open_store(args: argparse.Namespace, config: Mapping[str, Any]) -> RequestIndexStore:
    store = RequestIndexStore()
    if bool(config["store"]["seed_on_startup"]) and not _flag(args, "no_seed"):
        seed_if_empty(store)
    return store


def _resolve_depot(graph: DepotGraph, name: str) -> int:
    try:
        return graph.index_of(name)
    except KeyError as exc:
        expected = ", ".join(graph.names)
        raise CLIError(
            f"unknown depot {name!r}; expected one of: {expected}",
            exit_code=int(ExitCode.CONFIG_ERROR),
        ) from exc


def _parse_bound(raw: object, name: str, *, end_of_day: bool) -> datetime | None:
    text = _optional_str(raw)
    if text is None:
        return None

    try:
        day = date.fromisoformat(text)
    except ValueError:
        day = None
    if day is not None:
        parsed = datetime(day.year, day.month, day.day, tzinfo=UTC)
        if end_of_day:
            parsed += timedelta(days=1) - timedelta(microseconds=1)
        return parsed

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise CLIError(
            f"invalid --{name}: expected ISO-8601 date or datetime, got {text!r}",
            exit_code=int(ExitCode.CONFIG_ERROR),
        ) from exc
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}") from exc
    if value < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return value


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise CLIError(f"invalid {name}: expected string", exit_code=int(ExitCode.CONFIG_ERROR))
    cleaned = value.strip()
    if not cleaned:
        raise CLIError(
            f"invalid {name}: value cannot be empty", exit_code=int(ExitCode.CONFIG_ERROR)
        )
    return cleaned


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CLIError("invalid optional string argument", exit_code=int(ExitCode.CONFIG_ERROR))
    cleaned = value.strip()
    return cleaned or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
