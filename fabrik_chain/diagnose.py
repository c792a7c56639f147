#!/usr/bin/env python3
"""Benchmark the FABRIK chain solver on random targets.

Every target is solved from the same straight chain along +z. A summary row
is written per target to `<out>/summary.csv`; chains that were reachable but
did not converge are dumped to `<out>/case_XXX_chain.json`.
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import math
import os
import random
import time
from dataclasses import asdict, dataclass, fields, replace
from typing import List, Optional, Sequence

import numpy as np

from .common.log import initialize_logging
from .config import load_config
from .solvers import FABRIKChainSolver, SolveConfig, derive_lengths

logger = logging.getLogger(__name__)


@dataclass
class SolveSummary:
    case: int
    reachable: bool
    success: bool
    iters: int
    pos_err: float
    length_err: float
    time_ms: float


def straight_chain(num_joints: int, segment_length: float) -> np.ndarray:
    """(num_joints, 3) chain standing straight up from the origin."""
    chain = np.zeros((num_joints, 3), dtype=float)
    chain[:, 2] = np.arange(num_joints) * segment_length
    return chain


def sample_target(rng: random.Random, radius: float) -> np.ndarray:
    """Uniform random direction, distance uniform in [0, radius]."""
    z = rng.uniform(-1.0, 1.0)
    phi = rng.uniform(0.0, 2.0 * math.pi)
    s = math.sqrt(1.0 - z * z)
    r = rng.uniform(0.0, radius)
    return r * np.array([s * math.cos(phi), s * math.sin(phi), z], dtype=float)


def run_diagnosis(
    num_joints: int,
    segment_length: float,
    num_targets: int,
    seed: int,
    config: SolveConfig,
    out_dir: Optional[str] = None,
    plot: bool = False,
) -> List[SolveSummary]:
    """
    Solve `num_targets` random targets and collect summaries.

    Targets are drawn up to 1.2x the chain length, so some are unreachable.
    """
    rng = random.Random(seed)
    chain0 = straight_chain(num_joints, segment_length)
    rest = derive_lengths(chain0)
    total = float(np.sum(rest))

    solver = FABRIKChainSolver(config)
    summaries: List[SolveSummary] = []
    solved_chains = []

    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    for ti in range(num_targets):
        target = sample_target(rng, 1.2 * total)
        chain = chain0.copy()

        t0 = time.perf_counter()
        chain, ok, info = solver.solve(chain, target)
        ms = 1000.0 * (time.perf_counter() - t0)

        length_err = float(np.max(np.abs(derive_lengths(chain) - rest))) if len(rest) else 0.0
        summary = SolveSummary(
            case=ti,
            reachable=bool(info["reachable"]),
            success=ok,
            iters=int(info["iters_total"]),
            pos_err=float(info["pos_err"]),
            length_err=length_err,
            time_ms=ms,
        )
        summaries.append(summary)
        solved_chains.append((chain, target))

        logger.info(
            "[%03d] %s pe=%.4f, it=%d, ok=%s, len_err=%.2e, t=%.2f ms",
            ti,
            "REACH" if summary.reachable else "FAR  ",
            summary.pos_err,
            summary.iters,
            summary.success,
            summary.length_err,
            summary.time_ms,
        )

        if out_dir and summary.reachable and not summary.success:
            geom_json = os.path.join(out_dir, f"case_{ti:03d}_chain.json")
            with open(geom_json, "w") as f:
                json.dump(
                    {
                        "target": target.tolist(),
                        "p": chain.tolist(),
                        "pos_err": summary.pos_err,
                    },
                    f,
                    indent=2,
                )

    if out_dir:
        sum_csv = os.path.join(out_dir, "summary.csv")
        with open(sum_csv, "w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=[fd.name for fd in fields(SolveSummary)])
            w.writeheader()
            for s in summaries:
                w.writerow(asdict(s))
        logger.info("Saved summary to: %s", sum_csv)

        if plot:
            _save_plot(solved_chains, os.path.join(out_dir, "chains.png"))

    return summaries


def _save_plot(solved_chains, path: str) -> None:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    from .drawing import plot_chain

    ax = None
    for chain, target in solved_chains:
        ax = plot_chain(chain, ax=ax, target=target)
    if ax is not None:
        ax.figure.savefig(path, dpi=120)
        plt.close(ax.figure)
        logger.info("Saved plot to: %s", path)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Diagnose FABRIK convergence on random targets")
    ap.add_argument("--joints", type=int, default=5, help="number of joints in the chain")
    ap.add_argument("--segment-length", type=float, default=1.0)
    ap.add_argument("--targets", type=int, default=20, help="number of random targets")
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--config", type=str, default=None, help="YAML solver parameter file")
    ap.add_argument("--tolerance", type=float, default=None)
    ap.add_argument("--max-iterations", type=int, default=None)
    ap.add_argument("--stall-threshold", type=float, default=None)
    ap.add_argument("--out", type=str, default="diagnose_results")
    ap.add_argument("--plot", action="store_true", help="save chains.png with every solution")
    ap.add_argument("--log-level", type=str, default="INFO")
    ap.add_argument("--log-file", type=str, default=None)
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    initialize_logging(args.log_level, args.log_file)

    if args.joints < 1:
        logger.error("--joints must be at least 1, got %d", args.joints)
        return 2

    config = load_config(args.config) if args.config else SolveConfig(max_iterations=100)

    # Explicit flags win over the file.
    overrides = {}
    if args.tolerance is not None:
        overrides["tolerance"] = args.tolerance
    if args.max_iterations is not None:
        overrides["max_iterations"] = args.max_iterations if args.max_iterations >= 0 else None
    if args.stall_threshold is not None:
        overrides["stall_threshold"] = args.stall_threshold
    config = replace(config, **overrides)

    logger.info(
        "Chain: %d joints x %.3f, tolerance=%s, max_iterations=%s",
        args.joints,
        args.segment_length,
        config.tolerance,
        config.max_iterations,
    )

    summaries = run_diagnosis(
        args.joints,
        args.segment_length,
        args.targets,
        args.seed,
        config,
        out_dir=args.out,
        plot=args.plot,
    )

    failing = [s.case for s in summaries if s.reachable and not s.success]
    if failing:
        logger.warning("Reachable targets that did not converge: %s", failing)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
