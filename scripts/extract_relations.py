#!/usr/bin/env python3
"""CLI entrypoint for extracting relations from text.

Usage:
    python scripts/extract_relations.py sentences.txt
    python scripts/extract_relations.py --split --output-format tabbed -o out.tsv prose.txt
    echo "The cat sat on the mat." | python scripts/extract_relations.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running from a source checkout without installing.
sys.path.insert(0, str(Path(__file__).parent.parent))

from openrel.cli import run  # noqa: E402


def main() -> None:
    """Launch the extraction CLI."""
    run()


if __name__ == "__main__":
    main()
