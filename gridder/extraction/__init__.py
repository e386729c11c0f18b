"""Turn a statistics page into frequency tables."""

from gridder.extraction.parser import extract_pairs, extract_lengths, parse_content

__all__ = ["extract_pairs", "extract_lengths", "parse_content"]
