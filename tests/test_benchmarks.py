"""Structural tests for the notevc benchmark modules."""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent / "benchmarks"))


def test_bench_throughput_importable() -> None:
    """Verify bench_throughput module can be imported."""
    mod = importlib.import_module("bench_throughput")
    assert hasattr(mod, "bench_diff_throughput")
    assert hasattr(mod, "bench_save_throughput")


def test_bench_latency_importable() -> None:
    """Verify bench_latency module can be imported."""
    mod = importlib.import_module("bench_latency")
    assert hasattr(mod, "bench_check_latency")


def test_diff_throughput_returns_expected_keys() -> None:
    """Verify bench_diff_throughput returns expected result keys."""
    from bench_throughput import bench_diff_throughput

    result = bench_diff_throughput()
    assert "operation" in result
    assert "iterations" in result
    assert "ops_per_second" in result
    assert "avg_latency_ms" in result
    assert float(result["ops_per_second"]) > 0  # type: ignore[arg-type]


def test_save_throughput_returns_expected_keys() -> None:
    """Verify bench_save_throughput returns expected result keys."""
    from bench_throughput import bench_save_throughput

    result = bench_save_throughput()
    assert "operation" in result
    assert "ops_per_second" in result
    assert "avg_latency_ms" in result


def test_check_latency_reports_percentiles() -> None:
    """Verify bench_check_latency reports p50 <= p95."""
    from bench_latency import bench_check_latency

    result = bench_check_latency()
    assert float(result["p50_ms"]) <= float(result["p95_ms"])  # type: ignore[arg-type]


def test_diff_latency_names_operation() -> None:
    """Verify bench_diff_latency labels its result."""
    from bench_latency import bench_diff_latency

    assert bench_diff_latency()["operation"] == "notevc_diff_latency"
