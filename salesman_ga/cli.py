import argparse
import json
import sys
import time
from pathlib import Path

import torch

from salesman_ga.base import SolveResult
from salesman_ga.data import Instance, load_instance, random_instance, save_matrix, validate_cost_matrix
from salesman_ga.evaluation import GenerationStats, verify_population
from salesman_ga.evolutionary import GAConfig, GeneticAlgorithm, SelectionType


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def _load(args) -> Instance:
    if args.random is not None and args.path:
        raise ValueError("give either a path or --random, not both")
    if args.random is not None:
        return random_instance(args.random, seed=args.seed, symmetric=not args.asymmetric)
    if not args.path:
        raise ValueError("give a cost matrix path or --random N")
    return load_instance(Path(args.path))


def build_config(args) -> GAConfig:
    return GAConfig(
        population_size=args.population_size,
        reproduction_size=args.reproduction_size,
        max_iterations=args.max_iterations,
        mutation_rate=args.mutation_rate,
        tournament_size=args.tournament_size,
        selection=args.selection,
        target_fitness=args.target,
        random_seed=args.seed,
    )


def solve(args) -> int:
    t0 = time.perf_counter()
    try:
        instance = _load(args)
        cost = validate_cost_matrix(instance.cost_matrix, args.start)
        cfg = build_config(args)
        ga = GeneticAlgorithm(cost, args.start, cfg)
    except (ValueError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    log(
        f"instance {instance.name}: {instance.number_of_cities} cities, start={args.start}, "
        f"selection={cfg.selection.value}, population={cfg.population_size}"
    )

    def report(stats: GenerationStats) -> None:
        if args.log_every and stats.generation % args.log_every == 0:
            log(
                f"gen {stats.generation}: best={stats.best_so_far:.2f} "
                f"gen_best={stats.best:.2f} avg={stats.mean:.2f}"
            )

    try:
        best = ga.optimize(on_generation=report)
    except ValueError as exc:
        # e.g. roulette over zero-cost tours
        print(f"error: {exc}", file=sys.stderr)
        return 2
    log(f"finished after {ga.generation} generations in {time.perf_counter() - t0:.2f}s")

    if args.verify:
        device = torch.device("cuda" if torch.cuda.is_available() else "cpu")
        ok = verify_population(ga.population + [best], device=device)
        log(f"fitness verification on {device}: {'ok' if ok else 'MISMATCH'}")
        if not ok:
            return 1

    result = SolveResult(
        tour=list(best.tour),
        length=best.fitness,
        starting_city=best.starting_city,
        optimum=instance.optimum,
        generations=ga.generation,
        selection=cfg.selection.value,
    )
    print(best)
    if result.optimum is not None:
        print(f"Optimum: {result.optimum:g} (gap {result.gap:.2%})")
    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        payload = result.to_dict()
        payload["history"] = [s.to_dict() for s in ga.history]
        out.write_text(json.dumps(payload, indent=2))
        log(f"result written to {out}")
    return 0


def generate(args) -> int:
    try:
        instance = random_instance(args.cities, seed=args.seed, symmetric=not args.asymmetric)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    save_matrix(instance.cost_matrix, Path(args.output))
    log(f"wrote {args.cities}x{args.cities} cost matrix to {args.output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    defaults = GAConfig()
    parser = argparse.ArgumentParser(description="Genetic algorithm TSP solver")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve_parser = subparsers.add_parser("solve", help="Evolve a tour for a cost matrix")
    solve_parser.add_argument("path", nargs="?", help="Cost matrix (.txt/.csv) or TSPLIB (.tsp/.atsp) file")
    solve_parser.add_argument("--random", type=int, metavar="N", help="Solve a random N-city instance instead")
    solve_parser.add_argument("--asymmetric", action="store_true", help="Random instance is asymmetric")
    solve_parser.add_argument("--start", type=int, default=0, help="Starting city index")
    solve_parser.add_argument(
        "--selection", choices=[s.value for s in SelectionType], default=defaults.selection.value
    )
    solve_parser.add_argument("--population-size", type=int, default=defaults.population_size)
    solve_parser.add_argument("--reproduction-size", type=int, default=defaults.reproduction_size)
    solve_parser.add_argument("--max-iterations", type=int, default=defaults.max_iterations)
    solve_parser.add_argument("--mutation-rate", type=float, default=defaults.mutation_rate)
    solve_parser.add_argument("--tournament-size", type=int, default=defaults.tournament_size)
    solve_parser.add_argument(
        "--target", type=float, default=defaults.target_fitness, help="Stop once best cost drops below this"
    )
    solve_parser.add_argument("--seed", type=int, default=None)
    solve_parser.add_argument("--log-every", type=int, default=50, help="Log every N generations (0 = quiet)")
    solve_parser.add_argument("--verify", action="store_true", help="Recheck stored fitness with torch")
    solve_parser.add_argument("--output", help="Write the result as JSON")
    solve_parser.set_defaults(func=solve)

    gen_parser = subparsers.add_parser("generate", help="Write a random cost matrix")
    gen_parser.add_argument("cities", type=int)
    gen_parser.add_argument("output")
    gen_parser.add_argument("--seed", type=int, default=None)
    gen_parser.add_argument("--asymmetric", action="store_true")
    gen_parser.set_defaults(func=generate)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
