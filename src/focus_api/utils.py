from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .models import FocusEntry


# PUBLIC_INTERFACE
def filter_by_status(entries: Iterable[FocusEntry], status: bool) -> List[FocusEntry]:
    """Return the entries whose status equals `status`, preserving order."""
    return [e for e in entries if e.status == status]


# PUBLIC_INTERFACE
def compute_stats(entries: Iterable[FocusEntry]) -> Dict[str, Any]:
    """
    Build the statistics payload for a snapshot of entries.

    Args:
        entries: Every stored entry, as returned by a single find_all() call.

    Returns:
        Dict with keys: total, successes, failures, success_rate.
        success_rate is a percentage in [0, 100] and 0.0 for an empty snapshot.
    """
    # Materialize once so total and successes come from the same snapshot
    materialized: List[FocusEntry] = list(entries) if not isinstance(entries, list) else entries
    total = len(materialized)
    successes = len(filter_by_status(materialized, True))
    success_rate = (successes * 100.0) / total if total > 0 else 0.0
    return {
        "total": total,
        "successes": successes,
        "failures": total - successes,
        "success_rate": success_rate,
    }
