"""Entry point for running paperreview as a module or installed script.

Usage:
    paperreview / python -m paperreview         → GUI (uvicorn)
    paperreview <command> ... / python -m paperreview <command> ... → CLI
"""

import sys

import uvicorn

from paperreview.console import configure_logging


def run() -> None:
    """Entry point: no args → GUI (via uvicorn), else → CLI."""
    configure_logging()
    if len(sys.argv) == 1:
        uvicorn.run("paperreview.gui.app:app", host="127.0.0.1", port=8000, reload=True)
    else:
        from paperreview.cli import main
        sys.exit(main())


if __name__ == "__main__":
    run()
