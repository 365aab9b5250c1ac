#!/usr/bin/env python3
"""
Permanently remove an event, room or poll with everything it owns.

Rows are deleted children first in batches. A single pass stops at the
configured row ceiling; the script then runs further passes until the
subtree is gone. This cannot be undone.

Usage:
    python scripts/hard_delete.py {event,room,poll} <id> [--dry-run] [--yes]

Options:
    --dry-run    Show how many rows would be removed without changing anything
    --yes        Skip the confirmation prompt
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from uuid import UUID

from sqlmodel import Session

from planner.core.database import engine
from planner.core.errors import PlannerError
from planner.lifecycle.cascade import (
    count_subtree,
    hard_delete_event,
    hard_delete_poll,
    hard_delete_room,
)
from planner.models import Event, Poll, Room

TARGETS = {
    "event": (Event, hard_delete_event),
    "room": (Room, hard_delete_room),
    "poll": (Poll, hard_delete_poll),
}


def main(kind: str, entity_id: UUID, dry_run: bool = False, assume_yes: bool = False):
    """Show the subtree, confirm, then hard-delete until complete."""
    model, hard_delete = TARGETS[kind]

    with Session(engine) as session:
        root = session.get(model, entity_id)
        if not root:
            print(f"Error: {kind} {entity_id} not found.")
            sys.exit(1)

        counts = count_subtree(session, model, entity_id)
        state = "soft-deleted" if root.is_deleted else "active"
        print(f"{kind} {entity_id} ({state}) owns:")
        for table, count in counts.items():
            print(f"  {table}: {count}")
        print(f"  total: {sum(counts.values()) + 1} rows including the {kind}\n")

        if dry_run:
            print("--- DRY RUN: No changes made ---")
            return

        if not assume_yes:
            response = input(f"Permanently delete this {kind}? [y/N]: ")
            if response.lower() != "y":
                print("Aborted.")
                return

        passes = 0
        while True:
            passes += 1
            try:
                report = hard_delete(session, entity_id)
            except PlannerError as e:
                print(f"Error: {e.message}")
                sys.exit(1)
            print(f"Pass {passes}: removed {report.total} rows {report.deleted}")
            if report.complete:
                break

        print(f"\nComplete: {kind} {entity_id} removed in {passes} pass(es)")


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if len(args) != 2 or args[0] not in TARGETS:
        print(__doc__)
        sys.exit(2)
    try:
        target_id = UUID(args[1])
    except ValueError:
        print(f"Error: not a valid id: {args[1]}")
        sys.exit(2)
    main(
        args[0],
        target_id,
        dry_run="--dry-run" in sys.argv,
        assume_yes="--yes" in sys.argv,
    )
