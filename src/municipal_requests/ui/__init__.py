"""Command-line front end: argparse router and output rendering."""

from municipal_requests.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIRenderer", "create_renderer"]
