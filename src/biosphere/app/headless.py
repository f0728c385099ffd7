from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.fast_forward import validate_generation_count
from ..sim.core.organism import OrganismSettings, TRAIT_NAMES
from ..sim.core.scheduler import GenerationScheduler
from ..sim.types.metrics import GenerationMetrics
from ..sim.types.snapshot import PopulationSnapshot

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "generation",
    "population",
    "births",
    "deaths",
    "avg_energy",
    "avg_age",
    "max_generation",
    "tick_ms",
]

_DETAILED_HEADER = [
    "generation",
    "population",
    "births",
    "deaths",
    "starved",
    "died_of_age",
    "consumed",
    "predation_successes",
    "predation_failures",
    "avg_energy",
    "avg_age",
    "max_generation",
    "tick_ms",
    "births_per_organism",
    "deaths_per_organism",
    "organic",
    "minerals",
    *[f"mean_{name}" for name in TRAIT_NAMES],
]


def _format_basic_row(metrics: GenerationMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.generation,
        metrics.population,
        metrics.births,
        metrics.deaths,
        f"{metrics.average_energy:.4f}",
        f"{metrics.average_age:.4f}",
        metrics.max_generation,
        f"{tick_ms:.3f}",
    ]


def _mean_traits(snapshot: PopulationSnapshot) -> list[float]:
    population = snapshot.population
    if population <= 0:
        return [0.0 for _ in TRAIT_NAMES]
    return [
        sum(getattr(organism.traits, name) for organism in snapshot.organisms) / population
        for name in TRAIT_NAMES
    ]


def _format_detailed_row(snapshot: PopulationSnapshot, metrics: GenerationMetrics, tick_ms: float) -> list[object]:
    population = metrics.population
    if population <= 0:
        births_per_organism = 0.0
        deaths_per_organism = 0.0
    else:
        births_per_organism = metrics.births / population
        deaths_per_organism = metrics.deaths / population
    resources = snapshot.environment.resources
    return [
        metrics.generation,
        population,
        metrics.births,
        metrics.deaths,
        metrics.starved,
        metrics.died_of_age,
        metrics.consumed,
        metrics.predation_successes,
        metrics.predation_failures,
        f"{metrics.average_energy:.4f}",
        f"{metrics.average_age:.4f}",
        metrics.max_generation,
        f"{tick_ms:.3f}",
        f"{births_per_organism:.4f}",
        f"{deaths_per_organism:.4f}",
        f"{resources.organic:.2f}",
        f"{resources.minerals:.2f}",
        *[f"{value:.4f}" for value in _mean_traits(snapshot)],
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
    }


def run_headless(
    generations: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 100,
    population: Optional[int] = None,
    config_path: Optional[Path] = None,
    settings: OrganismSettings | None = None,
) -> PopulationSnapshot:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    scheduler = GenerationScheduler(config)
    count = validate_generation_count(generations)

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    snapshot = scheduler.initial_snapshot(settings, population)
    logger.info("running %d generations from %d founders (seed=%d)", count, snapshot.population, config.seed)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    population_series: list[float] = []
    tick_ms_series: list[float] = []
    peak_population = (snapshot.population, 0)
    extinct_at: Optional[int] = None

    try:
        for snapshot in scheduler.iter_generations(snapshot, count):
            metrics = snapshot.metrics
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            population_series.append(float(metrics.population))
            tick_ms_series.append(tick_ms)
            if metrics.population > peak_population[0]:
                peak_population = (metrics.population, metrics.generation)
            if metrics.population == 0 and extinct_at is None:
                extinct_at = metrics.generation
                logger.info("population went extinct at generation %d", extinct_at)
            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(snapshot, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(population_series) - window), len(population_series))
        summary = {
            "generations": count,
            "seed": config.seed,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "final_population": snapshot.population,
            "final_generation": snapshot.generation,
            "max_lineage_depth": max((o.generation for o in snapshot.organisms), default=0),
            "extinct_at": extinct_at,
            "population": _summary_stats(population_series),
            "tick_ms": _summary_stats(tick_ms_series),
            "peaks": {
                "population": {"value": peak_population[0], "generation": peak_population[1]},
            },
            "tail_window": {
                "window": window,
                "population": _summary_stats(population_series[tail_slice]),
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return snapshot


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless biosphere simulation")
    parser.add_argument("--generations", type=int, default=500)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--population", type=int, default=None, help="Number of founding organisms")
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-generation metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument("--summary", type=Path, default=None, help="Optional JSON file for run summary stats.")
    parser.add_argument("--summary-window", type=int, default=100, help="Tail window (generations) for summary stats.")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO")
    for name in TRAIT_NAMES:
        parser.add_argument(f"--{name}", type=float, default=None, help=f"Founding {name} trait")
    parser.add_argument("--size", type=float, default=None, help="Founding organism size")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = OrganismSettings.from_mapping({name: getattr(args, name) for name in (*TRAIT_NAMES, "size")})
    run_headless(
        args.generations,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        population=args.population,
        config_path=args.config,
        settings=settings,
    )


if __name__ == "__main__":
    main()
