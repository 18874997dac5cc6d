"""
---
version: 0.3.0
created: 2026-10-12
updated: 2026-10-19
---

vigenere.py — Shared module for Vigenère cryptanalysis.

Seven sections:
  1. Data constants (English reference model, IC constant, sample plaintext)
  2. Codec — letter <-> shift conversion
  3. Cipher transform (shift and Vigenère encrypt/decrypt)
  4. Frequency and coincidence (letter distributions, self/mutual IC)
  5. Key length estimation (partitioned self-IC + repeat-key disambiguation)
  6. Key recovery and the full crack pipeline
  7. Corpus and output utils (loader, English fit, synthetic text, formatting, plots)
"""

from __future__ import annotations

import math
import string
import warnings
from collections.abc import Mapping, Sequence
from pathlib import Path

import numpy as np

# ============================================================================
# 1. DATA CONSTANTS
# ============================================================================

ALPHABET = string.ascii_lowercase

# English letter frequencies, a..z. Sums to 1.001 (rounding in the table).
ENGLISH_FREQ: dict[str, float] = {
    "a": 0.082, "b": 0.015, "c": 0.028, "d": 0.043, "e": 0.127,
    "f": 0.022, "g": 0.020, "h": 0.061, "i": 0.070, "j": 0.002,
    "k": 0.008, "l": 0.040, "m": 0.024, "n": 0.067, "o": 0.075,
    "p": 0.019, "q": 0.001, "r": 0.060, "s": 0.063, "t": 0.091,
    "u": 0.028, "v": 0.010, "w": 0.023, "x": 0.001, "y": 0.020,
    "z": 0.001,
}

# Self-IC of English text (probability two random letters match).
ENGLISH_IC: float = 0.065

# Letters of ciphertext required per candidate key length.
MIN_SAMPLES: int = 40

# Opening of the Declaration of Independence, letters only.
SAMPLE_PLAINTEXT = (
    "wheninthecourseofhumaneventsitbecomesnecessaryforonepeopletodissolvethep"
    "oliticalbandswhichhaveconnectedthemwithanotherandtoassumeamongthepowerso"
    "ftheearththeseparateandequalstationtowhichthelawsofnatureandofnaturesgod"
    "entitlethemadecentrespecttotheopinionsofmankindrequiresthattheyshoulddec"
    "larethecauseswhichimpelthemtotheseparationweholdthesetruthstobeselfevide"
    "ntthatallmenarecreatedequalthattheyareendowedbytheircreatorwithcertainun"
    "alienablerightsthatamongthesearelifelibertyandthepursuitofhappinessthatt"
    "osecuretheserightsgovernmentsareinstitutedamongmenderivingtheirjustpower"
    "sfromtheconsentofthegovernedthatwheneveranyformofgovernmentbecomesdestru"
    "ctiveoftheseendsitistherightofthepeopletoalterortoabolishitandtoinstitut"
    "enewgovernmentlayingitsfoundationonsuchprinciplesandorganizingitspowersi"
    "nsuchformastothemshallseemmostlikelytoeffecttheirsafetyandhappinessprude"
    "nceindeedwilldictatethatgovernmentslongestablishedshouldnotbechangedforl"
    "ightandtransientcausesandaccordinglyallexperiencehathshewnthatmankindare"
    "moredisposedtosufferwhileevilsaresufferablethantorightthemselvesbyabolis"
    "hingtheformstowhichtheyareaccustomed"
)


class InsufficientDataError(ValueError):
    """Ciphertext too short (or degenerate) to produce a key-length estimate."""


def reference_vector(reference: Mapping[str, float] | Sequence[float] | np.ndarray) -> np.ndarray:
    """
    Coerce a reference model to a read-only 26-vector indexed a=0..z=25.

    Accepts a letter -> frequency mapping or any 26-long sequence.

    Raises:
        ValueError: If the model does not hold exactly 26 values.
    """
    if isinstance(reference, np.ndarray) and reference.shape == (26,) and not reference.flags.writeable:
        return reference
    if isinstance(reference, Mapping):
        missing = [c for c in ALPHABET if c not in reference]
        if missing:
            raise ValueError(f"Reference model missing letters: {''.join(missing)}")
        vec = np.array([reference[c] for c in ALPHABET], dtype=float)
    else:
        vec = np.array(reference, dtype=float)
    if vec.shape != (26,):
        raise ValueError(f"Reference model must hold 26 values, got shape {vec.shape}")
    vec.setflags(write=False)
    return vec


ENGLISH_VECTOR: np.ndarray = reference_vector(ENGLISH_FREQ)


# ============================================================================
# 2. CODEC — Letter <-> shift conversion
# ============================================================================

def letter_to_shift(letter: str) -> int:
    """Rank of a letter in the alphabet (a=0 .. z=25), case-insensitive."""
    return (ord(letter.lower()) - ord("a")) % 26


def shift_encode(letter: str, key: int) -> str:
    """Advance a letter by key places mod 26. Output is upper case."""
    return chr((letter_to_shift(letter) + key) % 26 + ord("A"))


def shift_decode(letter: str, key: int) -> str:
    """Move a letter back by key places mod 26. Output is lower case."""
    return chr((letter_to_shift(letter) - key) % 26 + ord("a"))


def key_to_shifts(key: str | Sequence[int]) -> list[int]:
    """
    Normalise a key to a list of shift values.

    Args:
        key: Alphabetic key string ("crypto") or a sequence of ints in 0-25.

    Returns:
        List of shifts, one per key position.

    Raises:
        ValueError: If the key is empty or holds a non-letter / out-of-range shift.
    """
    if isinstance(key, str):
        if not key or not (key.isascii() and key.isalpha()):
            raise ValueError(f"Key must be a non-empty string of letters, got {key!r}")
        return [letter_to_shift(c) for c in key]

    shifts = [int(k) for k in key]
    if not shifts:
        raise ValueError("Key must contain at least one shift")
    bad = [k for k in shifts if not 0 <= k < 26]
    if bad:
        raise ValueError(f"Shift values must be in 0-25, got {bad}")
    return shifts


def shifts_to_key(shifts: Sequence[int]) -> str:
    """Render shift values as a lowercase key string."""
    return "".join(ALPHABET[int(k) % 26] for k in shifts)


# ============================================================================
# 3. CIPHER TRANSFORM
# ============================================================================

def shift_encrypt(plaintext: str, key: int) -> str:
    """Shift (Caesar) cipher: every letter advanced by the same key."""
    return "".join(shift_encode(c, key) for c in plaintext)


def shift_decrypt(ciphertext: str, key: int) -> str:
    """Inverse of shift_encrypt()."""
    return "".join(shift_decode(c, key) for c in ciphertext)


def vigenere_encrypt(plaintext: str, key: str | Sequence[int]) -> str:
    """
    Encrypt with a repeating key: letter i is shifted by key[i mod len(key)].

    Returns upper-case ciphertext.
    """
    shifts = key_to_shifts(key)
    period = len(shifts)
    return "".join(shift_encode(c, shifts[i % period]) for i, c in enumerate(plaintext))


def vigenere_decrypt(ciphertext: str, key: str | Sequence[int]) -> str:
    """
    Decrypt with a repeating key: letter i is shifted back by key[i mod len(key)].

    Returns lower-case plaintext of the same length.
    """
    shifts = key_to_shifts(key)
    period = len(shifts)
    return "".join(shift_decode(c, shifts[i % period]) for i, c in enumerate(ciphertext))


# ============================================================================
# 4. FREQUENCY AND COINCIDENCE
# ============================================================================

def frequency(text: str) -> np.ndarray:
    """
    Relative letter frequencies of a text as a 26-vector (a..z).

    Each letter contributes 1/len(text). Empty text gives all zeros.
    Case is ignored.
    """
    n = len(text)
    if n == 0:
        return np.zeros(26)
    counts = np.bincount([letter_to_shift(c) for c in text], minlength=26)
    return counts / n


def index_of_coincidence(dist_a: Sequence[float] | np.ndarray, dist_b: Sequence[float] | np.ndarray) -> float:
    """
    Index of coincidence of two frequency distributions (their dot product).

    Pass the same distribution twice for self-IC.
    English self-IC: ~0.065. Uniform letters: 1/26 ~ 0.0385.
    """
    return float(np.dot(np.asarray(dist_a, dtype=float), np.asarray(dist_b, dtype=float)))


def mutual_ic_by_shift(
    dist: Sequence[float] | np.ndarray,
    reference: Mapping[str, float] | Sequence[float] | np.ndarray = ENGLISH_VECTOR,
) -> np.ndarray:
    """
    Mutual IC between a distribution rotated by each shift and the reference.

    Entry s is sum_j dist[(j + s) mod 26] * reference[j], i.e. how well the
    text matches the reference once every letter is moved back by s.
    """
    ref = reference_vector(reference)
    dist = np.asarray(dist, dtype=float)
    return np.array([index_of_coincidence(np.roll(dist, -s), ref) for s in range(26)])


# ============================================================================
# 5. KEY LENGTH ESTIMATION
# ============================================================================

def split_ciphertext(ciphertext: str, key_length: int) -> list[str]:
    """Split into key_length interleaved strings; string j holds positions = j mod key_length."""
    if key_length < 1:
        raise ValueError(f"key_length must be >= 1, got {key_length}")
    return [ciphertext[j::key_length] for j in range(key_length)]


def average_self_ic(ciphertext: str, key_length: int) -> float:
    """Average self-IC over the key_length interleaved partitions."""
    parts = split_ciphertext(ciphertext, key_length)
    total = 0.0
    for part in parts:
        freq = frequency(part)
        total += index_of_coincidence(freq, freq)
    return total / len(parts)


def analyze_key_length(
    ciphertext: str,
    english_ic: float = ENGLISH_IC,
    min_samples: int = MIN_SAMPLES,
) -> dict:
    """
    Estimate the key length and keep the evidence.

    Candidate lengths run from 1 to len(ciphertext) // min_samples (exclusive).
    The strongest average self-IC wins, then its divisors are checked: a true
    key of length L also scores well at 2L, 3L, ..., so a divisor whose IC sits
    at least as close to english_ic is preferred.

    Args:
        ciphertext: Letters only.
        english_ic: Expected self-IC of English plaintext.
        min_samples: Letters required per candidate length.

    Returns:
        dict with:
            key_length: final estimate
            best_raw_length: length with the highest average IC
            ic_by_length: {length: average self-IC}
            weaker: sorted lengths recorded as non-improving (one below the
                length that failed to beat the running best)
            shortlist: divisors of best_raw_length that passed the IC test
            num_candidates: number of lengths scored

    Raises:
        InsufficientDataError: If the text cannot yield any candidate length.
    """
    if min_samples < 1:
        raise ValueError(f"min_samples must be >= 1, got {min_samples}")
    num_keys = len(ciphertext) // min_samples
    if num_keys < 2:
        raise InsufficientDataError(
            f"Ciphertext has {len(ciphertext)} letters; at least {2 * min_samples} "
            f"are needed to score a key length"
        )

    ic_by_length: dict[int, float] = {}
    weaker: set[int] = set()
    best_raw = 0
    high = 0.0
    for i in range(1, num_keys):
        ic_avg = average_self_ic(ciphertext, i)
        ic_by_length[i] = ic_avg
        if ic_avg > high:
            high = ic_avg
            best_raw = i
        else:
            weaker.add(i - 1)

    if best_raw == 0:
        raise InsufficientDataError("No candidate key length produced a positive IC")

    # Repeat-key disambiguation
    best_distance = abs(ic_by_length[best_raw] - english_ic)
    shortlist: list[int] = []
    for d in range(2, best_raw):
        if best_raw % d != 0:
            continue
        candidate = best_raw // d
        if candidate in weaker and best_distance >= abs(ic_by_length[candidate] - english_ic):
            shortlist.append(candidate)

    key_length = best_raw
    greatest = 0.0
    for candidate in shortlist:
        if ic_by_length[candidate] > greatest:
            greatest = ic_by_length[candidate]
            key_length = candidate

    return {
        "key_length": key_length,
        "best_raw_length": best_raw,
        "ic_by_length": ic_by_length,
        "weaker": sorted(weaker),
        "shortlist": shortlist,
        "num_candidates": num_keys - 1,
    }


def estimate_key_length(
    ciphertext: str,
    english_ic: float = ENGLISH_IC,
    min_samples: int = MIN_SAMPLES,
) -> int:
    """Convenience: just the key length from analyze_key_length()."""
    return analyze_key_length(ciphertext, english_ic, min_samples)["key_length"]


# ============================================================================
# 6. KEY RECOVERY AND PIPELINE
# ============================================================================

def best_shift(
    text: str,
    reference: Mapping[str, float] | Sequence[float] | np.ndarray = ENGLISH_VECTOR,
) -> tuple[int | None, float]:
    """
    Find the shift that best aligns one partition with the reference.

    Returns:
        (shift, mutual IC). Ties go to the lowest shift. shift is None when no
        shift scores above zero (e.g. an empty partition).
    """
    scores = mutual_ic_by_shift(frequency(text), reference)
    shift = int(np.argmax(scores))
    if scores[shift] <= 0.0:
        return None, 0.0
    return shift, float(scores[shift])


def recover_key(
    ciphertext: str,
    key_length: int,
    reference: Mapping[str, float] | Sequence[float] | np.ndarray = ENGLISH_VECTOR,
) -> dict:
    """
    Recover each key character independently from its partition.

    Returns dict with:
        shifts: list of shift values, one per key position
        key: shifts as a lowercase string
        mic_scores: winning mutual IC per position
        unrecovered: positions where no shift scored (shift 0 used instead)
    """
    ref = reference_vector(reference)
    shifts: list[int] = []
    scores: list[float] = []
    unrecovered: list[int] = []
    for position, part in enumerate(split_ciphertext(ciphertext, key_length)):
        shift, score = best_shift(part, ref)
        if shift is None:
            unrecovered.append(position)
            shift = 0
        shifts.append(shift)
        scores.append(score)

    if unrecovered:
        warnings.warn(
            f"No shift with positive mutual IC at key position(s) {unrecovered}; "
            f"'a' used as a placeholder",
            RuntimeWarning,
            stacklevel=2,
        )

    return {
        "shifts": shifts,
        "key": shifts_to_key(shifts),
        "mic_scores": scores,
        "unrecovered": unrecovered,
    }


def crack(
    ciphertext: str,
    reference: Mapping[str, float] | Sequence[float] | np.ndarray = ENGLISH_VECTOR,
    english_ic: float = ENGLISH_IC,
    min_samples: int = MIN_SAMPLES,
) -> dict:
    """
    Full attack: key length -> key -> plaintext.

    Args:
        ciphertext: Letters only (any case).
        reference: English letter-frequency model (26 values or letter dict).
        english_ic: Expected self-IC of English plaintext.
        min_samples: Letters required per candidate key length.

    Returns:
        Merged dicts of analyze_key_length() and recover_key(), plus
        plaintext: lowercase decryption with the recovered key.

    Raises:
        InsufficientDataError: If the ciphertext is too short to analyse.
    """
    text = ciphertext.lower()
    analysis = analyze_key_length(text, english_ic=english_ic, min_samples=min_samples)
    recovery = recover_key(text, analysis["key_length"], reference)
    plaintext = vigenere_decrypt(text, recovery["shifts"])
    return {**analysis, **recovery, "plaintext": plaintext}


# ============================================================================
# 7. CORPUS AND OUTPUT UTILS
# ============================================================================

def text_to_alpha(text: str) -> str:
    """Extract only ASCII letters from text, lowercased."""
    return "".join(c.lower() for c in text if c in string.ascii_letters)


def load_ciphertext(filepath: str | Path) -> str:
    """Read a ciphertext file and strip everything but letters."""
    path = Path(filepath)
    return text_to_alpha(path.read_text(encoding="utf-8", errors="replace"))


def english_fit(
    text: str,
    reference: Mapping[str, float] | Sequence[float] | np.ndarray = ENGLISH_VECTOR,
) -> dict:
    """
    Compare a text's letter counts with the reference model.

    Returns dict with:
        chi2: chi-squared against the reference
        p_value: p-value (25 dof)
        kl_divergence: KL divergence (bits) from the reference
        ic: self-IC of the text
        n: letters counted
    """
    from scipy import stats as sp_stats

    clean = text_to_alpha(text)
    total = len(clean)
    if total == 0:
        return {"chi2": float("inf"), "p_value": 0.0, "kl_divergence": float("inf"), "ic": 0.0, "n": 0}

    ref = reference_vector(reference)
    obs_arr = np.bincount([letter_to_shift(c) for c in clean], minlength=26).astype(float)
    # No zero expected counts; rescale so totals match
    exp_arr = np.maximum(ref * total, 0.5)
    exp_arr = exp_arr * (obs_arr.sum() / exp_arr.sum())
    chi2, p_value = sp_stats.chisquare(obs_arr, exp_arr)

    obs_freq = obs_arr / total
    ref_freq = np.maximum(ref / ref.sum(), 1e-6)
    seen = obs_freq > 0
    kl = float(np.sum(obs_freq[seen] * np.log2(obs_freq[seen] / ref_freq[seen])))

    freq = frequency(clean)
    return {
        "chi2": float(chi2),
        "p_value": float(p_value),
        "kl_divergence": kl,
        "ic": index_of_coincidence(freq, freq),
        "n": total,
    }


def generate_english_text(
    length: int,
    rng: np.random.Generator | None = None,
    reference: Mapping[str, float] | Sequence[float] | np.ndarray = ENGLISH_VECTOR,
) -> str:
    """
    Random letters drawn independently with English frequencies.

    Matches English unigram statistics only, which is all the IC attack sees.
    """
    if rng is None:
        rng = np.random.default_rng()
    ref = reference_vector(reference)
    probs = ref / ref.sum()
    return "".join(ALPHABET[i] for i in rng.choice(26, size=length, p=probs))


def random_key(length: int, rng: np.random.Generator | None = None) -> str:
    """Uniformly random lowercase key of the given length."""
    if rng is None:
        rng = np.random.default_rng()
    return shifts_to_key(rng.integers(0, 26, size=length))


def format_ic_table(analysis: dict, english_ic: float = ENGLISH_IC) -> str:
    """
    Format the per-length IC scores from analyze_key_length().

    Markers: '*' highest raw IC, '+' shortlisted divisor, '<' final choice.
    """
    lines: list[str] = []
    header = f"{'Length':>6} {'Avg IC':>8} {'|IC-Eng|':>9}  Notes"
    lines.append(header)
    lines.append("-" * len(header))
    for length, ic in analysis["ic_by_length"].items():
        notes = []
        if length == analysis["best_raw_length"]:
            notes.append("*")
        if length in analysis["shortlist"]:
            notes.append("+")
        if length == analysis["key_length"]:
            notes.append("<")
        lines.append(f"{length:>6} {ic:>8.4f} {abs(ic - english_ic):>9.4f}  {' '.join(notes)}")
    return "\n".join(lines)


def format_plaintext(text: str, width: int = 60) -> str:
    """Format a long string for display with line wrapping and offsets."""
    lines: list[str] = []
    for i in range(0, len(text), width):
        lines.append(f"  {i:4d}: {text[i:i + width]}")
    return "\n".join(lines)


def plot_ic_profile(
    analysis: dict,
    english_ic: float = ENGLISH_IC,
    save_path: str | Path | None = None,
) -> None:
    """
    Bar chart of average self-IC by candidate key length.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        warnings.warn("matplotlib not available; skipping plot")
        return

    lengths = list(analysis["ic_by_length"])
    ics = [analysis["ic_by_length"][k] for k in lengths]
    colors = ["orange" if k == analysis["key_length"] else "steelblue" for k in lengths]

    fig, ax = plt.subplots(figsize=(max(6, 0.4 * len(lengths)), 4))
    ax.bar(lengths, ics, color=colors, alpha=0.8)
    ax.axhline(english_ic, color="red", linestyle="--", label=f"English IC ({english_ic})")
    ax.axhline(1 / 26, color="gray", linestyle=":", label="Uniform (1/26)")
    ax.set_xlabel("Candidate key length")
    ax.set_ylabel("Average self-IC")
    ax.set_title(f"IC profile (chosen length {analysis['key_length']})")
    ax.set_xticks(lengths)
    ax.legend(fontsize=8)

    plt.tight_layout()
    if save_path:
        plt.savefig(str(save_path), dpi=150, bbox_inches="tight")
        print(f"Saved: {save_path}")
        plt.close(fig)
    else:
        plt.show()


# ============================================================================
# SELF-TEST — Run when executed directly
# ============================================================================

def _self_test() -> None:
    """Encrypt the sample plaintext with known keys and crack it back."""
    print("=== vigenere.py self-test ===\n")

    # 1. Codec round-trip
    for c in ALPHABET:
        for k in range(26):
            assert shift_decode(shift_encode(c, k), k) == c, f"shift round-trip failed: {c!r}, {k}"
    print("Shift round-trip (26 x 26): PASS")

    # 2. Frequency sanity
    uniform = frequency(ALPHABET)
    assert math.isclose(index_of_coincidence(uniform, uniform), 1 / 26)
    print(f"Uniform self-IC: {index_of_coincidence(uniform, uniform):.4f} (1/26 = {1 / 26:.4f})")
    sample_freq = frequency(SAMPLE_PLAINTEXT)
    print(f"Sample self-IC:  {index_of_coincidence(sample_freq, sample_freq):.4f} "
          f"(English ~{ENGLISH_IC})\n")

    # 3. Known-answer cracks
    for key, length in [("crypto", 600), ("abab", 300), ("lemon", 400)]:
        plaintext = SAMPLE_PLAINTEXT[:length]
        result = crack(vigenere_encrypt(plaintext, key))
        ok = result["plaintext"] == plaintext
        print(f"key={key!r:<9} letters={length:<4} -> length={result['key_length']} "
              f"key={result['key']!r:<9} decrypt={'PASS' if ok else 'FAIL'}")
        assert ok, f"crack failed for key {key!r}"

    # 4. Too-short ciphertext
    try:
        crack(vigenere_encrypt(SAMPLE_PLAINTEXT[:2 * MIN_SAMPLES - 1], "crypto"))
    except InsufficientDataError as e:
        print(f"\nShort ciphertext: InsufficientDataError ({e})")
    else:
        raise AssertionError("short ciphertext was not rejected")

    print("\n=== Self-test complete ===")


if __name__ == "__main__":
    _self_test()
