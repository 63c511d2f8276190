"""
municipal-requests: CLI subprocess smoke contracts.

Runs ``python -m municipal_requests`` end to end and checks exit codes,
stdout payloads and the optional JSON-lines log file.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"


def _run_cli(cwd: Path, *args: str, **env_overrides: str) -> subprocess.CompletedProcess[str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("MUNIREQ_")}
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath
        if not existing_pythonpath
        else os.pathsep.join((src_pythonpath, existing_pythonpath))
    )
    env.update(env_overrides)
    return subprocess.run(
        [sys.executable, "-m", "municipal_requests", *args],
        cwd=cwd,
        text=True,
        capture_output=True,
        check=False,
        env=env,
    )


def test_help_exits_cleanly(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "--help")

    assert completed.returncode == 0, completed.stderr
    assert "munireq" in completed.stdout
    assert "depots" in completed.stdout


def test_urgent_json_lists_critical_requests_first(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "urgent", "-n", "4", "--json")

    assert completed.returncode == 0, completed.stderr
    payload = json.loads(completed.stdout)
    priorities = [item["priority"] for item in payload["requests"]]
    assert priorities == [3, 3, 3, 2]


def test_missing_ticket_exits_not_found(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "find", "SR-0000-0000")

    assert completed.returncode == 1
    assert completed.stderr.startswith("error: no request with ticket")


def test_verbose_logs_json_lines_to_stderr(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "list", "--json", "--verbose")

    assert completed.returncode == 0, completed.stderr
    events = [json.loads(line) for line in completed.stderr.splitlines() if line.strip()]
    messages = [event["message"] for event in events]
    assert messages[0] == "cli_command_started"
    assert messages.count("request_indexed") == 16
    assert all(event["command"] == "list" for event in events)
    assert len({event["session_id"] for event in events}) == 1


def test_log_file_written_when_enabled(tmp_path: Path) -> None:
    (tmp_path / "municipal.toml").write_text(
        '[observability]\nlog_to_file = true\nlog_level = "DEBUG"\nlog_dir = "var/logs"\n',
        encoding="utf-8",
    )

    completed = _run_cli(tmp_path, "depots", "bfs", "--json")

    assert completed.returncode == 0, completed.stderr
    log_path = tmp_path / "var" / "logs" / "municipal_requests.jsonl"
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0])["message"] == "cli_command_started"


def test_env_config_error_exits_with_code_2(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "config", MUNIREQ_STORE_SEED_ON_STARTUP="sometimes")

    assert completed.returncode == 2
    assert "must be a boolean" in completed.stderr
