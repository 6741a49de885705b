"""Benchmark: per-call latency of the edit-path checks (p50/p95/mean).

Both operations run on every editor change notification, so their
per-call latency matters more than raw throughput.
"""
from __future__ import annotations

import json
import sys
import time
from collections.abc import Callable
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import notevc

_WARMUP: int = 100
_ITERATIONS: int = 3_000

_SAVED = "\n".join(f"Paragraph {n}. " + "lorem ipsum " * 12 for n in range(25))
_EDITED = _SAVED.replace("Paragraph 12.", "Paragraph 12 (revised).") + "   \n\n"


def _measure(operation: str, call: Callable[[], object]) -> dict[str, object]:
    for _ in range(_WARMUP):
        call()

    samples: list[float] = []
    for _ in range(_ITERATIONS):
        t0 = time.perf_counter()
        call()
        samples.append((time.perf_counter() - t0) * 1000)

    ranked = sorted(samples)
    count = len(ranked)
    total = sum(samples) / 1000
    result: dict[str, object] = {
        "operation": operation,
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(samples) / count, 4),
        "p50_ms": round(ranked[count // 2], 4),
        "p95_ms": round(ranked[min(int(count * 0.95), count - 1)], 4),
    }
    print(
        f"[bench_latency] {operation}: "
        f"p50={result['p50_ms']:.4f}ms  p95={result['p95_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def bench_check_latency() -> dict[str, object]:
    """Latency of ``has_meaningful_changes`` on a 25-paragraph note.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p50_ms, p95_ms.
    """
    return _measure(
        "notevc_check_latency",
        lambda: notevc.has_meaningful_changes(_SAVED, _EDITED),
    )


def bench_diff_latency() -> dict[str, object]:
    """Latency of ``diff`` + ``describe`` on the same note."""
    return _measure(
        "notevc_diff_latency",
        lambda: notevc.describe(notevc.diff(_SAVED, _EDITED)),
    )


if __name__ == "__main__":
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)

    for bench_fn, fname in [
        (bench_check_latency, "check_latency_baseline.json"),
        (bench_diff_latency, "diff_latency_baseline.json"),
    ]:
        output_path = results_dir / fname
        output_path.write_text(json.dumps(bench_fn(), indent=2), encoding="utf-8")
        print(f"Results saved to {output_path}")
