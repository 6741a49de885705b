"""Summary table for notevc benchmark results."""
from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

_RESULT_FILES = [
    "diff_throughput_baseline.json",
    "save_throughput_baseline.json",
    "check_latency_baseline.json",
    "diff_latency_baseline.json",
]


def _load(path: Path) -> dict[str, object] | None:
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)  # type: ignore[return-value]


def main() -> None:
    results_dir = Path(__file__).parent / "results"
    console = Console()

    table = Table(title="notevc Benchmark Results")
    table.add_column("Operation", style="cyan")
    table.add_column("Ops/sec", justify="right")
    table.add_column("Avg Latency", justify="right")
    table.add_column("p95", justify="right")

    for fname in _RESULT_FILES:
        data = _load(results_dir / fname)
        if data is None:
            table.add_row(fname, "n/a", "n/a", "n/a")
            continue
        ops_sec = float(data.get("ops_per_second", 0))  # type: ignore[arg-type]
        avg_lat = float(data.get("avg_latency_ms", 0))  # type: ignore[arg-type]
        p95 = data.get("p95_ms")
        table.add_row(
            str(data.get("operation", fname)),
            f"{ops_sec:,.0f}",
            f"{avg_lat:.3f}ms",
            f"{float(p95):.3f}ms" if p95 is not None else "n/a",  # type: ignore[arg-type]
        )

    console.print(table)
    console.print("Run: python benchmarks/bench_throughput.py && python benchmarks/bench_latency.py")


if __name__ == "__main__":
    main()
