"""
---
version: 0.2.0
created: 2026-10-13
updated: 2026-10-19
---

phase2_monte_carlo.py — Monte Carlo recovery rates for the Vigenère attack.

For every (key length, ciphertext length) cell, generates random
English-frequency plaintexts and random keys, encrypts, cracks, and counts:
  1. exact: estimated key length equals the true length
  2. period: estimated length is a multiple of the true length
     (the key comes back repeated, decryption still works)
  3. plaintext: the decryption matches exactly

Cells where the ciphertext is too short to analyse are counted as skipped.

Usage:
    python3 phase2_monte_carlo.py [--trials N] [--key-lengths 1 2 ...]
                                  [--text-lengths 400 800 ...] [--no-plots]
                                  [--save-dir DIR] [--seed S] [--save FILE]
"""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path

import numpy as np

from vigenere import (
    MIN_SAMPLES,
    InsufficientDataError,
    crack, generate_english_text, random_key, vigenere_encrypt,
)

DEFAULT_KEY_LENGTHS = [1, 2, 3, 4, 5, 6, 7, 8]
DEFAULT_TEXT_LENGTHS = [200, 400, 600, 800, 1200]


def run_trial(key_length: int, text_length: int, rng: np.random.Generator,
              min_samples: int = MIN_SAMPLES) -> dict | None:
    """One synthetic encrypt/crack round. None if the text is too short."""
    plaintext = generate_english_text(text_length, rng)
    key = random_key(key_length, rng)
    try:
        result = crack(vigenere_encrypt(plaintext, key), min_samples=min_samples)
    except InsufficientDataError:
        return None
    return {
        "exact": result["key_length"] == key_length,
        "period": result["key_length"] % key_length == 0,
        "plaintext": result["plaintext"] == plaintext,
        "estimated": result["key_length"],
    }


def run_simulation(
    key_lengths: list[int],
    text_lengths: list[int],
    trials: int = 50,
    seed: int = 42,
    min_samples: int = MIN_SAMPLES,
) -> dict:
    """
    Run trials for every (key length, text length) cell.

    Returns dict with:
        cells: list of dicts {key_length, text_length, trials, skipped,
               exact_rate, period_rate, plaintext_rate, estimates}
        trials, seed, min_samples: run parameters
    """
    rng = np.random.default_rng(seed)
    cells: list[dict] = []
    total = len(key_lengths) * len(text_lengths)
    t0 = time.time()

    for n_cell, (key_length, text_length) in enumerate(
        (k, n) for k in key_lengths for n in text_lengths
    ):
        elapsed = time.time() - t0
        print(f"  Cell {n_cell + 1}/{total} (key={key_length}, letters={text_length}, "
              f"{elapsed:.0f}s)", end="\r")

        outcomes = [run_trial(key_length, text_length, rng, min_samples) for _ in range(trials)]
        done = [o for o in outcomes if o is not None]
        n_done = len(done)
        cells.append({
            "key_length": key_length,
            "text_length": text_length,
            "trials": trials,
            "skipped": trials - n_done,
            "exact_rate": sum(o["exact"] for o in done) / n_done if n_done else None,
            "period_rate": sum(o["period"] for o in done) / n_done if n_done else None,
            "plaintext_rate": sum(o["plaintext"] for o in done) / n_done if n_done else None,
            "estimates": [o["estimated"] for o in done],
        })

    print(f"\n  Total time: {time.time() - t0:.1f}s")
    return {"cells": cells, "trials": trials, "seed": seed, "min_samples": min_samples}


def print_rates(results: dict, metric: str = "exact_rate") -> None:
    """Print a key-length x text-length table of one success rate."""
    cells = results["cells"]
    key_lengths = sorted({c["key_length"] for c in cells})
    text_lengths = sorted({c["text_length"] for c in cells})
    lookup = {(c["key_length"], c["text_length"]): c for c in cells}

    print(f"\n{metric.replace('_', ' ').upper()} (rows: key length, cols: letters)")
    header = f"{'Key':>5}" + "".join(f"{n:>8}" for n in text_lengths)
    print(header)
    print("-" * len(header))
    for k in key_lengths:
        row = f"{k:>5}"
        for n in text_lengths:
            rate = lookup[(k, n)][metric]
            row += f"{'--':>8}" if rate is None else f"{rate:>7.0%} "
        print(row)


def plot_rates(results: dict, save_dir: Path) -> None:
    """Line plot of exact and period rates vs ciphertext length per key length."""
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        print("  matplotlib not available; skipping plots")
        return

    cells = results["cells"]
    key_lengths = sorted({c["key_length"] for c in cells})

    fig, axes = plt.subplots(1, 2, figsize=(11, 4), squeeze=False)
    for col, (metric, title) in enumerate([
        ("exact_rate", "Exact key length"),
        ("period_rate", "Multiple of true length"),
    ]):
        ax = axes[0][col]
        for k in key_lengths:
            row = sorted((c for c in cells if c["key_length"] == k and c[metric] is not None),
                         key=lambda c: c["text_length"])
            ax.plot([c["text_length"] for c in row], [c[metric] for c in row],
                    marker="o", label=f"L={k}")
        ax.set_title(title, fontsize=10)
        ax.set_xlabel("Ciphertext letters")
        ax.set_ylabel("Success rate")
        ax.set_ylim(-0.05, 1.05)
        ax.legend(fontsize=7, ncol=2)

    plt.suptitle(f"Vigenère recovery rates ({results['trials']} trials/cell)", fontsize=12)
    plt.tight_layout()
    path = save_dir / "monte_carlo_rates.png"
    plt.savefig(str(path), dpi=150, bbox_inches="tight")
    print(f"  Saved: {path}")
    plt.close(fig)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Monte Carlo recovery rates for the Vigenère attack")
    parser.add_argument("--trials", type=int, default=50, help="Trials per cell")
    parser.add_argument("--key-lengths", type=int, nargs="+", default=DEFAULT_KEY_LENGTHS)
    parser.add_argument("--text-lengths", type=int, nargs="+", default=DEFAULT_TEXT_LENGTHS)
    parser.add_argument("--divisor", type=int, default=MIN_SAMPLES,
                        help=f"Letters required per candidate key length (default: {MIN_SAMPLES})")
    parser.add_argument("--no-plots", action="store_true", help="Skip plot generation")
    parser.add_argument("--save-dir", type=str, default=".", help="Directory for output")
    parser.add_argument("--save", type=str, default=None, help="Write results JSON to this file")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args(argv)

    save_dir = Path(args.save_dir)

    print("=" * 70)
    print("MONTE CARLO RECOVERY RATES")
    print(f"Key lengths: {args.key_lengths}  Letters: {args.text_lengths}  "
          f"Trials/cell: {args.trials}")
    print("=" * 70)

    results = run_simulation(args.key_lengths, args.text_lengths,
                             trials=args.trials, seed=args.seed, min_samples=args.divisor)

    for metric in ["exact_rate", "period_rate", "plaintext_rate"]:
        print_rates(results, metric)

    if args.save:
        with open(args.save, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nSaved: {args.save}")

    if not args.no_plots:
        print("\nGenerating plots...")
        plot_rates(results, save_dir)

    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print("""
  Short ciphertexts inflate per-partition self-IC (each letter adds ~1/n),
  so the raw winner is usually the largest multiple of the true length in
  range. The divisor check pulls it back, but not always to the minimal
  period: a 'period' hit still decrypts correctly with a repeated key.
  Key length 1 can only come back as a repeated single letter.
""")


if __name__ == "__main__":
    main()
