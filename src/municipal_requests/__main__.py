"""Module entrypoint for ``python -m municipal_requests``."""

from __future__ import annotations

from municipal_requests.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
