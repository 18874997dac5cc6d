import json

import pytest

import phase1_crack
import phase2_monte_carlo
from vigenere import SAMPLE_PLAINTEXT, load_ciphertext, text_to_alpha, vigenere_encrypt


class TestLoader:
    def test_text_to_alpha_strips_punctuation(self):
        assert text_to_alpha("Hello, World! 42") == "helloworld"

    def test_load_ciphertext(self, tmp_path):
        path = tmp_path / "ciphertext.txt"
        path.write_text("LXFOP VEFRN\nHR.\n")
        assert load_ciphertext(path) == "lxfopvefrnhr"


class TestCrackCli:
    def test_report_from_file(self, tmp_path, capsys):
        path = tmp_path / "ciphertext.txt"
        path.write_text(vigenere_encrypt(SAMPLE_PLAINTEXT[:600], "crypto") + "\n")

        phase1_crack.main([str(path)])

        out = capsys.readouterr().out
        assert "Key: crypto" in out
        assert "Estimated length: 6" in out
        assert SAMPLE_PLAINTEXT[:60] in out

    def test_json_output(self, tmp_path, capsys):
        path = tmp_path / "ct.txt"
        path.write_text(vigenere_encrypt(SAMPLE_PLAINTEXT[:300], "abab"))

        phase1_crack.main([str(path), "--json"])

        result = json.loads(capsys.readouterr().out)
        assert result["key"] == "ab"
        assert result["key_length"] == 2
        assert result["plaintext"] == SAMPLE_PLAINTEXT[:300]

    def test_demo_mode(self, capsys):
        phase1_crack.main(["--demo", "lemon", "--demo-length", "400"])
        assert "Key: lemon" in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "nope.txt"
        with pytest.raises(SystemExit) as exc:
            phase1_crack.main([str(missing)])
        assert str(exc.value) == f"Could not find file: {missing}"

    def test_short_ciphertext(self, tmp_path):
        path = tmp_path / "short.txt"
        path.write_text("ABCDEFGHIJ")
        with pytest.raises(SystemExit) as exc:
            phase1_crack.main([str(path)])
        assert "Cannot analyse ciphertext" in str(exc.value)

    def test_divisor_flag(self, tmp_path):
        path = tmp_path / "ct.txt"
        path.write_text(vigenere_encrypt(SAMPLE_PLAINTEXT[:600], "crypto"))
        with pytest.raises(SystemExit):
            phase1_crack.main([str(path), "--divisor", "400"])


class TestMonteCarlo:
    def test_simulation_structure(self, capsys):
        results = phase2_monte_carlo.run_simulation([2, 3], [100, 400], trials=3, seed=1)
        cells = results["cells"]
        assert len(cells) == 4
        for cell in cells:
            assert cell["trials"] == 3
            assert cell["skipped"] + len(cell["estimates"]) == 3
            for metric in ["exact_rate", "period_rate", "plaintext_rate"]:
                assert cell[metric] is None or 0.0 <= cell[metric] <= 1.0

    def test_too_short_cells_are_skipped(self, capsys):
        results = phase2_monte_carlo.run_simulation([3], [50], trials=2, seed=0)
        cell = results["cells"][0]
        assert cell["skipped"] == 2
        assert cell["exact_rate"] is None

    def test_seed_reproducible(self, capsys):
        a = phase2_monte_carlo.run_simulation([4], [400], trials=4, seed=5)
        b = phase2_monte_carlo.run_simulation([4], [400], trials=4, seed=5)
        assert a["cells"][0]["estimates"] == b["cells"][0]["estimates"]

    def test_main_prints_tables(self, tmp_path, capsys):
        save = tmp_path / "mc.json"
        phase2_monte_carlo.main([
            "--trials", "2", "--key-lengths", "2", "--text-lengths", "400",
            "--no-plots", "--save", str(save),
        ])
        out = capsys.readouterr().out
        assert "EXACT RATE" in out
        assert json.loads(save.read_text())["trials"] == 2
