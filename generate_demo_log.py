"""
Generate a demo LCS log for the viewer.
Run: python generate_demo_log.py [--format jsonl] [--iterations 40]
"""

import argparse

import numpy as np

from lcsview.config import DEFAULT_COLUMNS
from lcsview.log_writer import write_jsonl_log, write_text_log
from lcsview.snapshot import Snapshot


def _matches(condition: str, bits: str) -> bool:
    return all(c == "#" or c == b for c, b in zip(condition, bits))


def generate_snapshots(iterations=40, population_size=60, condition_bits=6,
                       record_every=50, seed=0):
    """Simulate the classifier sets of a small XCS run on random inputs."""
    rng = np.random.default_rng(seed)
    alphabet = np.array(["0", "1", "#"])

    population = []
    for _ in range(population_size):
        condition = "".join(rng.choice(alphabet, size=condition_bits,
                                       p=[0.3, 0.3, 0.4]))
        population.append({
            "condition": condition,
            "action": str(rng.integers(0, 2)),
            "prediction": float(rng.uniform(0, 1000)),
            "error": float(rng.uniform(0, 100)),
            "fitness": float(rng.uniform(0, 0.2)),
        })

    snapshots = []
    for n in range(iterations):
        tick = n * record_every
        bits = "".join(rng.choice(alphabet[:2], size=condition_bits))
        snap = Snapshot(columns=DEFAULT_COLUMNS, iteration=tick, input=bits)

        # Drift toward accurate, fit classifiers as training goes on
        for cl in population:
            cl["error"] *= float(rng.uniform(0.9, 1.0))
            cl["fitness"] = min(1.0, cl["fitness"] + float(rng.uniform(0, 0.02)))
            cl["prediction"] += float(rng.normal(0, 10))

        match_set = [cl for cl in population if _matches(cl["condition"], bits)]
        action = str(rng.integers(0, 2))
        action_set = [cl for cl in match_set if cl["action"] == action]
        for cl in action_set:
            cl["timestamp"] = tick

        for name, members in (("population", population),
                              ("match_set", match_set),
                              ("action_set", action_set)):
            table = snap.classifier_set(name)
            for cl in members:
                table.add_row([
                    cl["condition"], cl["action"],
                    f"{cl['prediction']:.3f}", f"{cl['error']:.3f}",
                    f"{cl['fitness']:.4f}", str(cl.get("timestamp", 0)),
                ])
        snapshots.append(snap)
    return snapshots


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate a demo LCS log")
    parser.add_argument("--format", choices=["default", "jsonl"], default="default")
    parser.add_argument("--iterations", type=int, default=40)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--out", help="Output path (default: logs/example.log "
                                      "or logs/example.jsonl)")
    args = parser.parse_args(argv)

    snapshots = generate_snapshots(iterations=args.iterations, seed=args.seed)
    if args.format == "jsonl":
        path = write_jsonl_log(snapshots, args.out or "logs/example.jsonl")
    else:
        path = write_text_log(snapshots, args.out or "logs/example.log")

    print(f"✅ Log saved to: {path}")
    print(f"   Total iterations logged: {len(snapshots)}")
    return path


if __name__ == "__main__":
    main()
