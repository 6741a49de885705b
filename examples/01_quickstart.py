#!/usr/bin/env python3
"""Example: Quickstart — notevc

Minimal working example: diff two drafts, check whether an edit is
meaningful, then save and list snapshots of a note.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install notevc
"""
from __future__ import annotations

import notevc
from notevc import VersionControlService
from notevc.models import Document

DRAFT_V1 = """Shopping list
- milk
- eggs
"""

DRAFT_V2 = """Shopping list
- oat milk
- eggs
- bread
"""


def main() -> None:
    print(f"notevc version: {notevc.__version__}")

    # Line-level stats between two drafts
    stats = notevc.diff(DRAFT_V1, DRAFT_V2)
    print(f"\nDiff: {notevc.describe(stats)}")
    print(f"  added={stats.added_lines} removed={stats.removed_lines} "
          f"chars={stats.changed_chars}")

    # Trailing whitespace and blank lines are not meaningful
    meaningful = notevc.has_meaningful_changes(DRAFT_V1, DRAFT_V1 + '   \n\n')
    print(f"\nWhitespace edit meaningful? "
          f"{meaningful}")

    # Save two snapshots through the service
    service = VersionControlService.create()
    doc = Document(id="shopping", title="Shopping", content=DRAFT_V1)
    service.create_manual_version(doc)
    doc.update(content=DRAFT_V2, now=0.0)
    service.create_manual_version(doc)

    print("\nHistory (newest first):")
    for snapshot in service.get_versions(doc.id):
        print(f"  {snapshot}")

    service.dispose()


if __name__ == "__main__":
    main()
