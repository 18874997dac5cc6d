import math
import string

import numpy as np
import pytest

from vigenere import (
    ENGLISH_FREQ,
    ENGLISH_VECTOR,
    SAMPLE_PLAINTEXT,
    english_fit,
    frequency,
    generate_english_text,
    index_of_coincidence,
    mutual_ic_by_shift,
    reference_vector,
    vigenere_encrypt,
)


class TestFrequency:
    @pytest.mark.parametrize(
        "text",
        ["a", "zzzz", "hello", SAMPLE_PLAINTEXT, SAMPLE_PLAINTEXT[:37]],
    )
    def test_sums_to_one(self, text):
        assert math.isclose(frequency(text).sum(), 1.0, abs_tol=1e-9)

    def test_empty_text_is_all_zero(self):
        freq = frequency("")
        assert freq.shape == (26,)
        assert not freq.any()

    def test_counts_are_relative(self):
        freq = frequency("aab")
        assert freq[0] == pytest.approx(2 / 3)
        assert freq[1] == pytest.approx(1 / 3)
        assert freq[2:].sum() == 0

    def test_mixed_case_treated_consistently(self):
        assert np.allclose(frequency("HeLLo"), frequency("hello"))


class TestIndexOfCoincidence:
    def test_uniform_text_self_ic(self):
        freq = frequency(string.ascii_lowercase)
        assert index_of_coincidence(freq, freq) == pytest.approx(1 / 26)

    def test_single_letter_text_self_ic_is_one(self):
        freq = frequency("eeee")
        assert index_of_coincidence(freq, freq) == pytest.approx(1.0)

    def test_english_beats_uniform(self):
        freq = frequency(SAMPLE_PLAINTEXT)
        assert index_of_coincidence(freq, freq) > 0.06

    def test_is_a_plain_dot_product(self):
        a = [0.5, 0.5] + [0.0] * 24
        b = [1.0] + [0.0] * 25
        assert index_of_coincidence(a, b) == pytest.approx(0.5)

    def test_mutual_ic_peaks_at_true_shift(self):
        # every letter moved forward by 7
        scores = mutual_ic_by_shift(frequency(vigenere_encrypt(SAMPLE_PLAINTEXT, "h")))
        assert scores.shape == (26,)
        assert int(np.argmax(scores)) == 7

    def test_mutual_ic_rotation(self):
        scores = mutual_ic_by_shift(frequency("g" * 10))
        # 'g' aligned with each reference letter j when j = 6 - s
        for s in range(26):
            assert scores[s] == pytest.approx(ENGLISH_VECTOR[(6 - s) % 26])


class TestReferenceModel:
    def test_vector_matches_table(self):
        assert ENGLISH_VECTOR.shape == (26,)
        assert ENGLISH_VECTOR[4] == ENGLISH_FREQ["e"]
        assert ENGLISH_VECTOR.sum() == pytest.approx(1.0, abs=0.01)

    def test_vector_is_read_only(self):
        with pytest.raises(ValueError):
            ENGLISH_VECTOR[0] = 0.5

    def test_sequence_reference_accepted(self):
        vec = reference_vector([1 / 26] * 26)
        assert vec.shape == (26,)

    @pytest.mark.parametrize("bad", [[0.1] * 25, {"a": 1.0}])
    def test_wrong_size_rejected(self, bad):
        with pytest.raises(ValueError):
            reference_vector(bad)


class TestEnglishFit:
    def test_plaintext_fits_better_than_ciphertext(self):
        plain = english_fit(SAMPLE_PLAINTEXT)
        cipher = english_fit(vigenere_encrypt(SAMPLE_PLAINTEXT, "crypto"))
        assert plain["chi2"] < cipher["chi2"]
        assert plain["kl_divergence"] < cipher["kl_divergence"]
        assert plain["n"] == len(SAMPLE_PLAINTEXT)

    def test_non_letters_ignored(self):
        assert english_fit("Hello, world!")["n"] == 10

    def test_empty_text(self):
        fit = english_fit("")
        assert fit["n"] == 0
        assert math.isinf(fit["chi2"])


class TestSyntheticText:
    def test_length_and_alphabet(self):
        text = generate_english_text(500, np.random.default_rng(0))
        assert len(text) == 500
        assert set(text) <= set(string.ascii_lowercase)

    def test_seeded_generation_is_reproducible(self):
        a = generate_english_text(100, np.random.default_rng(7))
        b = generate_english_text(100, np.random.default_rng(7))
        assert a == b

    def test_letter_statistics_are_english_like(self):
        text = generate_english_text(5000, np.random.default_rng(1))
        freq = frequency(text)
        assert index_of_coincidence(freq, freq) == pytest.approx(0.065, abs=0.008)
