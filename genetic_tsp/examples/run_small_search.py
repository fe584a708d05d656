import random

from genetic_tsp.data import random_instance, random_population
from genetic_tsp.evaluation import TourFitness
from genetic_tsp.evolutionary import EvolutionConfig, GeneticAlgorithm


def main():
    instance = random_instance(12, seed=7)
    cfg = EvolutionConfig(population_size=30, mutation_probability=0.1, max_iterations=200, random_seed=7)
    engine = GeneticAlgorithm.from_config(cfg, instance.cities)
    fitness = TourFitness(instance.graph)
    population = random_population(instance.cities, cfg.population_size, random.Random(cfg.random_seed))

    def report(event):
        if event.generation % 20 == 0:
            print(f"gen {event.generation}: best fitness={event.best_fitness:.5f}")

    engine.subscribe(report)
    best = engine.run(population, fitness, max_iterations=cfg.max_iterations)
    print(f"best tour={list(best.representation)} length={fitness.length(best):.2f}")


if __name__ == "__main__":
    main()
