"""Benchmark: line diff and snapshot save throughput.

Measures how many diffs and manual saves complete per second through
the public ``notevc.diff()`` and ``VersionStore.save_version()`` APIs.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import notevc
from notevc.backends.memory import InMemoryBackend
from notevc.config import VersionControlConfig
from notevc.models.nodes import ChangeType, Document
from notevc.store.version_store import VersionStore

_ITERATIONS: int = 2_000
_SAVE_ITERATIONS: int = 500

_OLD_NOTE = "\n".join(f"- item {n}: buy milk and eggs" for n in range(40))
_NEW_NOTE = "\n".join(
    f"- item {n}: buy {'oat ' if n % 7 == 0 else ''}milk and eggs" for n in range(40)
) + "\n- item 40: call the plumber"


def _report(operation: str, iterations: int, elapsed: float) -> dict[str, object]:
    result: dict[str, object] = {
        "operation": operation,
        "iterations": iterations,
        "total_seconds": round(elapsed, 4),
        "ops_per_second": round(iterations / elapsed, 1),
        "avg_latency_ms": round(elapsed / iterations * 1000, 4),
    }
    print(
        f"[bench_throughput] {operation}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def bench_diff_throughput() -> dict[str, object]:
    """Benchmark line diffing of a 40-line note.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms.
    """
    start = time.perf_counter()
    for _ in range(_ITERATIONS):
        notevc.diff(_OLD_NOTE, _NEW_NOTE)
    return _report("notevc_diff_throughput", _ITERATIONS, time.perf_counter() - start)


def bench_save_throughput() -> dict[str, object]:
    """Benchmark manual saves into an in-memory store.

    Every iteration appends a line so each save is meaningful; the
    per-document version cap keeps the history short.
    """
    store = VersionStore(InMemoryBackend(), VersionControlConfig())
    document = Document(id="bench", title="Bench", content=_OLD_NOTE)

    start = time.perf_counter()
    for n in range(_SAVE_ITERATIONS):
        document.update(content=f"{_OLD_NOTE}\nline {n}", now=float(n))
        store.save_version(document, ChangeType.MANUAL)
    return _report("notevc_save_throughput", _SAVE_ITERATIONS, time.perf_counter() - start)


if __name__ == "__main__":
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)

    for bench_fn, fname in [
        (bench_diff_throughput, "diff_throughput_baseline.json"),
        (bench_save_throughput, "save_throughput_baseline.json"),
    ]:
        output_path = results_dir / fname
        output_path.write_text(json.dumps(bench_fn(), indent=2), encoding="utf-8")
        print(f"Results saved to {output_path}")
