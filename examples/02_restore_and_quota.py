#!/usr/bin/env python3
"""Example: Restoring snapshots and keeping storage in budget

Demonstrates both restore policies, version deletion rules, and how the
quota manager trims histories when storage fills up.

Usage:
    python examples/02_restore_and_quota.py

Requirements:
    pip install notevc
"""
from __future__ import annotations

from notevc import VersionControlService
from notevc.config import RestorePolicy, VersionControlConfig
from notevc.models import Document


def _edit_three_times(service: VersionControlService, doc: Document) -> None:
    for text in ("First draft", "First draft\nwith a second line", "Rewritten entirely"):
        doc.update(content=text, now=0.0)
        service.create_manual_version(doc)


def main() -> None:
    # Default policy: restoring only moves the document back
    service = VersionControlService.create()
    doc = Document(id="essay", title="Essay", content="")
    _edit_three_times(service, doc)

    service.restore_version(doc, 1)
    print(f"After apply-only restore: version={doc.version} content={doc.content!r}")
    print(f"  history size: {len(service.get_versions(doc.id))}")

    # The version the document points at cannot be deleted
    print(f"  delete v3 (current): {service.delete_version(doc, 3)}")
    print(f"  delete v2:           {service.delete_version(doc, 2)}")
    service.dispose()

    # Recording policy: a restore appends a RESTORE snapshot
    config = VersionControlConfig(restore_policy=RestorePolicy.RECORD_VERSION)
    service = VersionControlService.create(config)
    doc = Document(id="essay", title="Essay", content="")
    _edit_three_times(service, doc)

    restored = service.restore_version(doc, 1)
    print(f"\nAfter recorded restore: {restored}")
    service.dispose()

    # Quota: report usage, then trim every history to one snapshot
    service = VersionControlService.create()
    for n in range(3):
        note = Document(id=f"note-{n}", title=f"Note {n}", content="")
        _edit_three_times(service, note)

    status = service.get_quota_status()
    print(f"\nStorage: {status.document_count} documents, "
          f"{status.version_count} versions, {status.total_size} bytes")
    removed = service.quota.cleanup_oldest(1)
    print(f"Trimmed {removed} old snapshot(s); "
          f"now {service.get_quota_status().version_count} versions")
    service.dispose()


if __name__ == "__main__":
    main()
