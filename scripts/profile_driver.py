#!/usr/bin/env python3
"""Queue driver profiler.

Usage:
    python scripts/profile_driver.py --ticks 500 --agents 200
    python scripts/profile_driver.py --ticks 2000 --agents 500 --cprofile driver.prof

Reports:
    - Per-tick timing statistics (min, max, mean, p50, p95, p99)
    - Split between host systems and the queue driver
    - Lifecycle callback counts by category
    - Optional: cProfile dump for flame graph generation
"""

from __future__ import annotations

import argparse
import cProfile
import io
import os
import pstats
import statistics
import sys
import time

# Ensure project root is on path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from seqactions.actions.countdown import countdown_system
from seqactions.config import SimulationConfig
from seqactions.core.world_state import WorldState
from seqactions.engine.driver import QueueDriver
from seqactions.systems.demo import DemoScenario
from seqactions.systems.rng import DeterministicRNG


def _run(cfg: SimulationConfig, num_ticks: int) -> dict:
    """Drive the demo scenario tick by tick, timing systems and driver separately."""
    world = WorldState(cfg)
    scenario = DemoScenario(cfg, DeterministicRNG(cfg.world_seed))
    scenario.populate(world)
    driver = QueueDriver()

    tick_times: list[float] = []
    phase_times: list[tuple[float, float]] = []
    categories: dict[str, int] = {}

    for _ in range(num_ticks):
        world.tick_events = []
        world.tick += 1
        t0 = time.perf_counter()
        countdown_system(world)
        scenario(world)
        t1 = time.perf_counter()
        driver.step(world)
        t2 = time.perf_counter()

        tick_times.append(t2 - t0)
        phase_times.append((t1 - t0, t2 - t1))
        for ev in world.tick_events:
            categories[ev.category] = categories.get(ev.category, 0) + 1

    return {
        "tick_times": tick_times,
        "phase_times": phase_times,
        "categories": categories,
        "spawned": scenario.total_spawned,
        "despawned": scenario.total_despawned,
    }


def _percentile(data: list[float], p: float) -> float:
    ordered = sorted(data)
    k = (len(ordered) - 1) * p / 100
    lo = int(k)
    hi = min(lo + 1, len(ordered) - 1)
    return ordered[lo] + (ordered[hi] - ordered[lo]) * (k - lo)


def _print_report(data: dict, wall_time: float) -> None:
    tick_times = data["tick_times"]
    num_ticks = len(tick_times)
    if num_ticks == 0:
        print("No ticks executed.")
        return

    print("\n" + "=" * 70)
    print("  QUEUE DRIVER PERFORMANCE REPORT")
    print("=" * 70)

    print(f"\n  Ticks executed:    {num_ticks}")
    print(f"  Wall clock time:   {wall_time:.3f}s")
    print(f"  Throughput:        {num_ticks / wall_time:.1f} ticks/sec")
    print(f"  Agents spawned:    {data['spawned']} ({data['despawned']} despawned)")

    print(f"\n  {'Metric':<16} {'Time (ms)':>10}")
    print(f"  {'-' * 16} {'-' * 10}")
    print(f"  {'Min':<16} {min(tick_times) * 1000:>10.3f}")
    print(f"  {'P50 (median)':<16} {_percentile(tick_times, 50) * 1000:>10.3f}")
    print(f"  {'P95':<16} {_percentile(tick_times, 95) * 1000:>10.3f}")
    print(f"  {'P99':<16} {_percentile(tick_times, 99) * 1000:>10.3f}")
    print(f"  {'Max':<16} {max(tick_times) * 1000:>10.3f}")
    if num_ticks > 1:
        print(f"  {'StdDev':<16} {statistics.stdev(tick_times) * 1000:>10.3f}")

    total = sum(tick_times) or 1.0
    print(f"\n  {'Phase':<16} {'Avg (ms)':>10} {'% Total':>10}")
    print(f"  {'-' * 16} {'-' * 10} {'-' * 10}")
    for idx, name in enumerate(("systems", "driver")):
        times = [p[idx] for p in data["phase_times"]]
        print(f"  {name:<16} {statistics.mean(times) * 1000:>10.3f} {sum(times) / total * 100:>9.1f}%")

    print(f"\n  {'Callback':<16} {'Count':>10}")
    print(f"  {'-' * 16} {'-' * 10}")
    for name, count in sorted(data["categories"].items()):
        print(f"  {name:<16} {count:>10}")

    print("\n" + "=" * 70)


def main() -> None:
    parser = argparse.ArgumentParser(description="Profile the action queue driver")
    parser.add_argument("--ticks", type=int, default=500)
    parser.add_argument("--agents", type=int, default=200)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--cprofile", type=str, default=None, help="Save cProfile output to file")
    args = parser.parse_args()

    cfg = SimulationConfig(
        world_seed=args.seed,
        max_ticks=args.ticks,
        initial_agent_count=args.agents,
    )

    print(f"Profiling: {args.ticks} ticks, {args.agents} agents, seed={args.seed}")

    profiler = cProfile.Profile() if args.cprofile else None
    if profiler:
        profiler.enable()

    t0 = time.perf_counter()
    data = _run(cfg, args.ticks)
    wall_time = time.perf_counter() - t0

    if profiler:
        profiler.disable()

    _print_report(data, wall_time)

    if profiler:
        profiler.dump_stats(args.cprofile)
        print(f"\n  cProfile data saved to: {args.cprofile}")
        print(f"  View with: python -m pstats {args.cprofile}")

        print(f"\n  Top 20 functions by cumulative time:")
        stream = io.StringIO()
        ps = pstats.Stats(profiler, stream=stream)
        ps.sort_stats("cumulative")
        ps.print_stats(20)
        print(stream.getvalue())


if __name__ == "__main__":
    main()
