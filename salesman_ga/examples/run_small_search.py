import random

import numpy as np

from salesman_ga.evolutionary import GAConfig, GeneticAlgorithm


def main():
    cost = np.array(
        [
            [0, 10, 15, 20],
            [10, 0, 35, 25],
            [15, 35, 0, 30],
            [20, 25, 30, 0],
        ]
    )
    for selection in ("tournament", "roulette"):
        cfg = GAConfig(
            population_size=100,
            reproduction_size=20,
            max_iterations=30,
            tournament_size=10,
            selection=selection,
        )
        ga = GeneticAlgorithm(cost, starting_city=0, config=cfg, rng=random.Random(7))
        best = ga.optimize(
            on_generation=lambda s: print(f"gen {s.generation}: best={s.best_so_far:.0f} avg={s.mean:.1f}")
        )
        print(f"[{selection}]")
        print(best)


if __name__ == "__main__":
    main()
