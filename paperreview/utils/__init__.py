"""Utility functions."""

from paperreview.utils.text import clean_title, extract_doi, normalize_doi, split_tags, to_paper_id

__all__ = ["clean_title", "extract_doi", "normalize_doi", "split_tags", "to_paper_id"]
