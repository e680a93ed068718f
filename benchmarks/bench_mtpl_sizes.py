"""Fit time of each solver on growing subsamples of the MTPL dataset."""
import gc
import warnings
warnings.filterwarnings("ignore")

import numpy as np

from glmbench.benchmark import run_benchmark
from glmbench.constants import DEFAULT_SOLVERS
from glmbench.data import load_mtpl_frequency, sample_rows
from glmbench.design import build_design
from glmbench.deviance import compare_objectives
from glmbench.log import configure_logging
from glmbench.solvers import available_solvers

SIZES = [10_000, 100_000, 250_000, None]  # None = full dataset
N_RUNS = 3


def label(n_rows, full):
    if n_rows is None or n_rows >= full:
        return "Full"
    return f"{n_rows // 1000}K"


def main():
    configure_logging("WARNING")
    solvers = available_solvers(DEFAULT_SOLVERS + ("glum",))
    full = load_mtpl_frequency()
    results = {s: [] for s in solvers}
    agreement = []

    print("MTPL Size Benchmark")
    print(f"Solvers: {', '.join(solvers)}")
    print("=" * 50)

    for n_rows in SIZES:
        df = full if n_rows is None else sample_rows(full, n_rows)
        design = build_design(df)
        print(f"\nn={design.n_obs:,}...", flush=True)

        bench = run_benchmark(design, solvers, n_runs=N_RUNS, measure_mem=True)
        objectives = compare_objectives(list(bench.models.values()), design)
        agreement.append(objectives.max_rel_diff)

        for s in solvers:
            t = float(np.median(bench.seconds(s)))
            results[s].append((t, bench.memory_mb[s]))
            print(f"  {s:<12} {t:.3f}s, {bench.memory_mb[s]:.1f}MB")

        del design, bench
        gc.collect()

    cols = [label(n, full.height) for n in SIZES]

    print("\n### Time")
    print("| Solver | " + " | ".join(cols) + " |")
    print("|--------|" + "|".join("-" * (len(c) + 2) for c in cols) + "|")
    for s in solvers:
        print(f"| {s} |" + "".join(f" {t:.3f}s |" for t, _ in results[s]))

    print("\n### Peak Memory")
    print("| Solver | " + " | ".join(cols) + " |")
    print("|--------|" + "|".join("-" * (len(c) + 2) for c in cols) + "|")
    for s in solvers:
        print(f"| {s} |" + "".join(f" {m:.0f}MB |" for _, m in results[s]))

    print("\n### Max relative deviance difference")
    print("| " + " | ".join(cols) + " |")
    print("|" + "|".join("-" * (len(c) + 2) for c in cols) + "|")
    print("|" + "".join(f" {d:.1e} |" for d in agreement))


if __name__ == "__main__":
    main()
