"""Console UI for terminal output using Rich."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from paperreview.models.paper import PaperMetadata
from paperreview.models.review import ReviewRecord


def configure_logging(level: int = logging.INFO) -> None:
    """Send log records through Rich (idempotent)."""
    root = logging.getLogger()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        return
    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)


class ConsoleUI:
    """Rich-based console UI for paper and review display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize console."""
        self.console = console or Console()

    def info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(message)

    def error(self, message: str) -> None:
        """Print an error message in red."""
        self.console.print(f"[red]Error:[/red] {message}")

    def display_paper(self, paper: PaperMetadata) -> None:
        """Display fetched paper metadata, or the lookup error."""
        if not paper.ok:
            self.error(paper.error or "lookup failed")
            return

        table = Table(title=paper.title or "(no title)", show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value", overflow="fold")
        table.add_row("Authors", ", ".join(a.name for a in paper.authors) or "-")
        table.add_row("Venue", paper.venue or "-")
        table.add_row("Year", str(paper.year) if paper.year else "-")
        if paper.journal.name:
            journal = paper.journal.name
            if paper.journal.volume:
                journal += f", vol. {paper.journal.volume}"
            if paper.journal.pages:
                journal += f", pp. {paper.journal.pages}"
            table.add_row("Journal", journal)
        table.add_row("DOI", paper.doi or "-")
        table.add_row("URL", paper.url or "-")
        self.console.print(table)

    def display_reviews(self, reviews: list[ReviewRecord], title: str = "Reviews") -> None:
        """Display reviews in a formatted table."""
        if not reviews:
            self.console.print("No reviews found.")
            return

        table = Table(title=title)
        table.add_column("ID", justify="right")
        table.add_column("Date", width=10)
        table.add_column("Paper", overflow="fold")
        table.add_column("Reviewer")
        table.add_column("Tags", overflow="fold")

        for review in reviews:
            table.add_row(
                review.id,
                (review.created_at or "")[:10] or "-",
                review.paper_title,
                review.reviewer_name,
                ", ".join(review.tags) or "-",
            )

        self.console.print(table)
