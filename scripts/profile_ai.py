#!/usr/bin/env python3
"""Automated AI profiler.

Usage:
    python scripts/profile_ai.py --ticks 2000 --seed 42
    python scripts/profile_ai.py --ticks 2000 --seed 42 --cprofile profile.prof
    python scripts/profile_ai.py --ticks 2000 --seed 42 --memory

Reports:
    - Per-tick timing statistics (min, max, mean, p50, p95, p99)
    - Time split between the scripted player and the AI system tick
    - Agent count and difficulty over time
    - Throughput (ticks/sec)
    - Optional: cProfile dump for flame graph generation
    - Optional: tracemalloc memory snapshot
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
import tracemalloc

# Ensure project root is on path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from horde.config import AIConfig
from horde.engine.driver import SimulationDriver


def _run_session(cfg: AIConfig, num_ticks: int) -> dict:
    """Run a scripted session and collect per-tick timing data."""
    driver = SimulationDriver(cfg)
    dt = cfg.tick_rate

    tick_times: list[float] = []
    player_times: list[float] = []
    ai_times: list[float] = []
    agent_counts: list[int] = []
    difficulties: list[float] = []

    for _ in range(num_ticks):
        t_start = time.perf_counter()
        driver.player.drive(dt)
        driver.player.fire(driver.system, dt)
        signals = driver.player.signals(driver.system)
        t1 = time.perf_counter()
        events = driver.system.tick_once(dt, signals)
        driver.player.absorb(events)
        t2 = time.perf_counter()

        tick_times.append(t2 - t_start)
        player_times.append(t1 - t_start)
        ai_times.append(t2 - t1)
        agent_counts.append(driver.system.active_count())
        difficulties.append(driver.system.difficulty.level)

    return {
        "tick_times": tick_times,
        "player_times": player_times,
        "ai_times": ai_times,
        "agent_counts": agent_counts,
        "difficulties": difficulties,
        "spawn_stats": driver.system.spawner.statistics(),
    }


def _percentile(data: list[float], p: float) -> float:
    """Simple percentile calculation."""
    if not data:
        return 0.0
    sorted_data = sorted(data)
    k = (len(sorted_data) - 1) * (p / 100.0)
    f = int(k)
    c = f + 1
    if c >= len(sorted_data):
        return sorted_data[f]
    return sorted_data[f] + (k - f) * (sorted_data[c] - sorted_data[f])


def _print_report(data: dict, wall_time: float) -> None:
    """Print a formatted performance report."""
    tick_times = data["tick_times"]
    agent_counts = data["agent_counts"]
    difficulties = data["difficulties"]
    num_ticks = len(tick_times)

    if num_ticks == 0:
        print("No ticks executed.")
        return

    print("\n" + "=" * 70)
    print("  AI PERFORMANCE REPORT")
    print("=" * 70)

    print(f"\n  Ticks executed:    {num_ticks}")
    print(f"  Wall clock time:   {wall_time:.3f}s")
    print(f"  Throughput:        {num_ticks / wall_time:.1f} ticks/sec")
    print(f"  Avg tick time:     {statistics.mean(tick_times) * 1000:.2f}ms")

    print(f"\n  Agents (end):      {agent_counts[-1]}")
    print(f"  Agents (peak):     {max(agent_counts)}")
    print(f"  Difficulty range:  {min(difficulties):.2f} .. {max(difficulties):.2f} (end {difficulties[-1]:.2f})")

    spawn = data["spawn_stats"]
    print(f"  Spawns:            {spawn['fulfilled']} fulfilled / {spawn['total_requested']} requested")

    print(f"\n  {'Metric':<16} {'Time (ms)':>10}")
    print(f"  {'-' * 16} {'-' * 10}")
    print(f"  {'Min':<16} {min(tick_times) * 1000:>10.3f}")
    print(f"  {'P50 (median)':<16} {_percentile(tick_times, 50) * 1000:>10.3f}")
    print(f"  {'P95':<16} {_percentile(tick_times, 95) * 1000:>10.3f}")
    print(f"  {'P99':<16} {_percentile(tick_times, 99) * 1000:>10.3f}")
    print(f"  {'Max':<16} {max(tick_times) * 1000:>10.3f}")
    if num_ticks > 1:
        print(f"  {'StdDev':<16} {statistics.stdev(tick_times) * 1000:>10.3f}")

    total_sum = sum(tick_times)
    print(f"\n  {'Phase':<16} {'Avg (ms)':>10} {'P95 (ms)':>10} {'% Total':>10}")
    print(f"  {'-' * 16} {'-' * 10} {'-' * 10} {'-' * 10}")
    for name, times in [("Player", data["player_times"]), ("AI tick", data["ai_times"])]:
        avg_ms = statistics.mean(times) * 1000
        p95_ms = _percentile(times, 95) * 1000
        pct = (sum(times) / total_sum * 100) if total_sum > 0 else 0
        print(f"  {name:<16} {avg_ms:>10.3f} {p95_ms:>10.3f} {pct:>9.1f}%")

    print("\n  Top 5 slowest ticks:")
    indexed = sorted(enumerate(tick_times), key=lambda x: x[1], reverse=True)[:5]
    for tick_idx, t in indexed:
        print(f"    Tick {tick_idx:>5}: {t * 1000:.3f}ms  ({agent_counts[tick_idx]} agents)")

    print("\n" + "=" * 70)


def main() -> None:
    parser = argparse.ArgumentParser(description="Profile the AI system")
    parser.add_argument("--ticks", type=int, default=2000, help="Number of ticks to run")
    parser.add_argument("--seed", type=int, default=42, help="RNG seed")
    parser.add_argument("--max-agents", type=int, default=50, help="Agent cap")
    parser.add_argument("--difficulty", type=float, default=1.0, help="Initial difficulty")
    parser.add_argument("--cprofile", type=str, default=None, help="Save cProfile output to file")
    parser.add_argument("--memory", action="store_true", help="Enable tracemalloc memory profiling")
    args = parser.parse_args()

    cfg = AIConfig(seed=args.seed, max_agents=args.max_agents, initial_difficulty=args.difficulty)

    print(f"Profiling: {args.ticks} ticks, seed={args.seed}, "
          f"max_agents={args.max_agents}, difficulty={args.difficulty}")

    if args.memory:
        tracemalloc.start()

    profiler = None
    if args.cprofile:
        profiler = cProfile.Profile()
        profiler.enable()

    wall_start = time.perf_counter()
    data = _run_session(cfg, args.ticks)
    wall_time = time.perf_counter() - wall_start

    if profiler:
        profiler.disable()

    _print_report(data, wall_time)

    if profiler and args.cprofile:
        profiler.dump_stats(args.cprofile)
        print(f"\n  cProfile data saved to: {args.cprofile}")
        print(f"  View with: python -m pstats {args.cprofile}")

        print("\n  Top 20 functions by cumulative time:")
        stream = io.StringIO()
        ps = pstats.Stats(profiler, stream=stream)
        ps.sort_stats("cumulative")
        ps.print_stats(20)
        print(stream.getvalue())

    if args.memory:
        snapshot = tracemalloc.take_snapshot()
        print("\n  Top 15 memory allocations by size:")
        print(f"  {'File:Line':<60} {'Size':>10}")
        print(f"  {'-' * 60} {'-' * 10}")
        for stat in snapshot.statistics("lineno")[:15]:
            print(f"  {str(stat.traceback):<60} {stat.size / 1024:>8.1f} KB")

        current, peak = tracemalloc.get_traced_memory()
        print(f"\n  Current memory: {current / 1024:.1f} KB")
        print(f"  Peak memory:    {peak / 1024:.1f} KB")
        tracemalloc.stop()


if __name__ == "__main__":
    main()
