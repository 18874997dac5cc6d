"""
---
version: 0.2.0
created: 2026-10-12
updated: 2026-10-19
---

phase1_crack.py — Crack a Vigenère ciphertext file.

Steps:
  1. Load ciphertext (letters only; whitespace/punctuation stripped)
  2. Key-length scan — average self-IC per candidate length, divisor check
  3. Key recovery — per-position mutual IC against English
  4. Plaintext + English fit (chi2, KL) of the result

Generates:
  - Report (stdout), or the raw result as JSON with --json
  - IC profile plot (ic_profile.png) with --plot

Usage:
    python3 phase1_crack.py [FILE] [--divisor N] [--english-ic X] [--json]
    python3 phase1_crack.py --demo KEY [--demo-length N]
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from vigenere import (
    ENGLISH_IC, MIN_SAMPLES, SAMPLE_PLAINTEXT,
    InsufficientDataError,
    crack, english_fit, load_ciphertext, vigenere_encrypt,
    format_ic_table, format_plaintext, plot_ic_profile,
)

DEFAULT_FILE = "ciphertext.txt"


def print_report(result: dict, english_ic: float = ENGLISH_IC) -> None:
    """Print the key-length scan, recovered key and plaintext."""
    print("=" * 70)
    print("1. KEY LENGTH SCAN")
    print("=" * 70)
    print(f"\nCandidates scored: {result['num_candidates']}")
    print()
    print(format_ic_table(result, english_ic))
    print(f"\n  Highest raw IC:   length {result['best_raw_length']}")
    if result["shortlist"]:
        print(f"  Divisor shortlist: {result['shortlist']}")
    print(f"  Estimated length: {result['key_length']}")

    print("\n" + "=" * 70)
    print("2. KEY RECOVERY")
    print("=" * 70)
    print(f"\n{'Pos':>4} {'Shift':>6} {'Letter':>7} {'Mutual IC':>10}")
    print("-" * 30)
    for pos, (shift, score) in enumerate(zip(result["shifts"], result["mic_scores"])):
        flag = "  (unrecovered)" if pos in result["unrecovered"] else ""
        print(f"{pos:>4} {shift:>6} {result['key'][pos]:>7} {score:>10.4f}{flag}")
    print(f"\n  Key: {result['key']}")

    fit = english_fit(result["plaintext"])
    print("\n" + "=" * 70)
    print("3. PLAINTEXT")
    print("=" * 70)
    print(f"\n  Self-IC:        {fit['ic']:.4f}  (English ~{english_ic}, random ~0.0385)")
    print(f"  Chi2 vs Eng:    {fit['chi2']:.1f}  (p={fit['p_value']:.4f})")
    print(f"  KL divergence:  {fit['kl_divergence']:.3f}")
    print()
    print(format_plaintext(result["plaintext"]))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Recover the key of a Vigenère ciphertext")
    parser.add_argument("file", nargs="?", default=DEFAULT_FILE,
                        help=f"Ciphertext file (default: {DEFAULT_FILE})")
    parser.add_argument("--divisor", type=int, default=MIN_SAMPLES,
                        help=f"Letters required per candidate key length (default: {MIN_SAMPLES})")
    parser.add_argument("--english-ic", type=float, default=ENGLISH_IC,
                        help=f"Expected self-IC of English (default: {ENGLISH_IC})")
    parser.add_argument("--demo", type=str, default=None, metavar="KEY",
                        help="Encrypt the built-in sample with KEY instead of reading a file")
    parser.add_argument("--demo-length", type=int, default=600,
                        help="Letters of the sample to use with --demo (default: 600)")
    parser.add_argument("--json", action="store_true", help="Print the raw result as JSON")
    parser.add_argument("--plot", action="store_true", help="Save the IC profile plot")
    parser.add_argument("--save-dir", type=str, default=".", help="Directory for plot output")
    args = parser.parse_args(argv)

    if args.demo:
        ciphertext = vigenere_encrypt(SAMPLE_PLAINTEXT[:args.demo_length], args.demo)
    else:
        try:
            ciphertext = load_ciphertext(args.file)
        except FileNotFoundError:
            sys.exit(f"Could not find file: {args.file}")

    try:
        result = crack(ciphertext, english_ic=args.english_ic, min_samples=args.divisor)
    except InsufficientDataError as e:
        sys.exit(f"Cannot analyse ciphertext: {e}")

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print_report(result, args.english_ic)

    if args.plot:
        try:
            plot_ic_profile(result, args.english_ic, save_path=Path(args.save_dir) / "ic_profile.png")
        except Exception as e:
            print(f"  Plot generation failed: {e}")


if __name__ == "__main__":
    main()
