"""Command-line interface handlers."""

import argparse
import asyncio
from typing import Optional

from paperreview.config import Settings
from paperreview.console import ConsoleUI
from paperreview.database.repository import ReviewRepository
from paperreview.services.paper_service import PaperService


class PaperReviewCLI:
    """CLI application for PaperReview."""

    def __init__(self, settings: Optional[Settings] = None, ui: Optional[ConsoleUI] = None):
        """Initialize CLI with settings.

        Args:
            settings: Application settings (loads from .metadata if not provided)
            ui: Console UI (a default Rich console if not provided)
        """
        self.settings = settings or Settings.load()
        self.ui = ui or ConsoleUI()
        self.repo = ReviewRepository(self.settings.db_path)

    def cmd_lookup(self, doi: str, service: Optional[PaperService] = None) -> bool:
        """Look a paper up and print its metadata.

        Returns:
            True if the lookup succeeded
        """
        service = service or PaperService(
            api_key=self.settings.api_key,
            timeout=self.settings.lookup_timeout,
        )
        paper = asyncio.run(service.fetch_paper_by_doi(doi))
        self.ui.display_paper(paper)
        return paper.ok

    def cmd_list(self, user: Optional[str] = None, tag: Optional[str] = None, limit: int = 50) -> None:
        """List stored reviews.

        Args:
            user: Only reviews created by this user id
            tag: Only reviews carrying this tag
            limit: Maximum reviews to display
        """
        if user:
            reviews = self.repo.find_by_user(user, limit=limit)
            if tag:
                reviews = [r for r in reviews if tag in r.tags]
        elif tag:
            reviews = self.repo.find_by_tag(tag, limit=limit)
        else:
            reviews = self.repo.find_recent(limit=limit)
        self.ui.display_reviews(reviews)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="paperreview",
        description="DOI → Semantic Scholar → review → SQLite",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # lookup command
    lookup_parser = subparsers.add_parser("lookup", help="Fetch paper metadata by DOI")
    lookup_parser.add_argument("doi", help="DOI, DOI URL, or Semantic Scholar id")

    # list command
    list_parser = subparsers.add_parser("list", help="List stored reviews")
    list_parser.add_argument("--user", default=None, help="Filter by creator user id")
    list_parser.add_argument("--tag", default=None, help="Filter by tag")
    list_parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum reviews to display (default: 50)",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    cli = PaperReviewCLI()

    if args.command == "lookup":
        return 0 if cli.cmd_lookup(args.doi) else 1
    if args.command == "list":
        cli.cmd_list(args.user, args.tag, args.limit)
    return 0
