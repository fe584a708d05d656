import argparse
import json
import logging
import random
import time
from pathlib import Path

from genetic_tsp.data import load_instance, random_instance, random_population
from genetic_tsp.evaluation import RunSummary, TourFitness
from genetic_tsp.evolutionary import EvolutionConfig, GeneticAlgorithm
from genetic_tsp.metrics import TIME_IN_MILLISECONDS, ProgressEvent


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def _progress_printer(report_every: int):
    def on_progress(event: ProgressEvent) -> None:
        if event.generation % report_every == 0:
            log(f"gen {event.generation}: best={event.best_fitness:.6g} elapsed={event.elapsed_ms:.0f}ms")

    return on_progress


def run(args) -> RunSummary:
    if args.tsp:
        instance = load_instance(Path(args.tsp))
    else:
        instance = random_instance(args.random, seed=args.seed)
    cities = instance.cities
    log(f"instance {instance.name}: {len(cities)} cities")

    cfg = EvolutionConfig(
        population_size=args.population,
        mutation_probability=args.mutation,
        max_iterations=args.iterations,
        max_time_ms=args.time_ms,
        random_seed=args.seed,
    )
    engine = GeneticAlgorithm.from_config(cfg, cities)
    engine.subscribe(_progress_printer(max(1, args.report_every)))
    fitness = TourFitness.with_torch(instance.graph) if args.torch else TourFitness(instance.graph)
    population = random_population(cities, cfg.population_size, random.Random(cfg.random_seed))

    best = engine.run(
        population,
        fitness,
        max_iterations=cfg.max_iterations,
        max_time_ms=cfg.max_time_ms,
    )
    elapsed = engine.metrics.get(TIME_IN_MILLISECONDS).last or 0.0
    summary = RunSummary(
        tour=best.representation,
        length=fitness.length(best),
        optimum=instance.optimum,
        generations=engine.iterations,
        elapsed_ms=elapsed,
    )
    log(f"finished after {summary.generations} generations in {summary.elapsed_ms:.0f}ms")
    print("best tour:", " ".join(str(c) for c in summary.tour))
    print(f"length={summary.length:.2f} gap={summary.gap:.4f}")

    if args.metrics_json:
        out = Path(args.metrics_json)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(engine.metrics.to_state(), indent=2))
        log(f"metrics written to {out}")
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Genetic algorithm for the TSP")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every generation")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Evolve a tour for one instance")
    source = run_parser.add_mutually_exclusive_group()
    source.add_argument("--tsp", help="TSPLIB .tsp file")
    source.add_argument("--random", type=int, default=20, help="Number of random cities")
    run_parser.add_argument("--population", type=int, default=EvolutionConfig.population_size)
    run_parser.add_argument("--mutation", type=float, default=EvolutionConfig.mutation_probability)
    run_parser.add_argument("--iterations", type=int, default=EvolutionConfig.max_iterations)
    run_parser.add_argument("--time-ms", type=float, default=EvolutionConfig.max_time_ms)
    run_parser.add_argument("--seed", type=int, default=EvolutionConfig.random_seed)
    run_parser.add_argument("--report-every", type=int, default=50)
    run_parser.add_argument("--torch", action="store_true", help="Score tours with a torch distance matrix")
    run_parser.add_argument("--metrics-json", help="Write the recorded metrics to this file")
    run_parser.set_defaults(func=run)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
