"""
Tests for the command line driver.
"""

import numpy as np
import pytest
from PIL import Image

from core.logging_config import logging_manager
from scripts.compare_denoisers import build_config, main, parse_args


@pytest.fixture
def image_file(tmp_path):
    rng = np.random.default_rng(0)
    pixels = (rng.random((32, 32)) * 255).astype(np.uint8)
    path = tmp_path / "test.png"
    Image.fromarray(pixels).save(path)
    return path


class TestBuildConfig:
    """Test merging of YAML and command line options."""

    def test_defaults(self):
        config = build_config(parse_args([]))

        assert config.noise_sigma == 0.04
        assert config.window_size == 5
        assert config.use_oracle_noise_variance is True

    def test_cli_overrides(self):
        args = parse_args(
            [
                "--sigma", "0.1",
                "--window", "3", "7",
                "--seed", "4",
                "--ai-model", "identity",
                "--ai-weights", "dncnn_25",
            ]
        )

        config = build_config(args)

        assert config.noise_sigma == 0.1
        assert config.window_size == (3, 7)
        assert config.seed == 4
        assert config.ai_model == "identity"
        assert config.ai_weights == "dncnn_25"

    def test_yaml_then_cli(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("noise_sigma: 0.2\nwindow_size: 7\nnoise_variance: 0.05\n")

        config = build_config(parse_args(["--config", str(path), "--window", "3"]))

        assert config.noise_sigma == 0.2
        assert config.window_size == 3
        assert config.noise_variance == 0.05

    def test_estimate_noise_clears_explicit_variance(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("noise_variance: 0.05\n")

        config = build_config(parse_args(["--config", str(path), "--estimate-noise"]))

        assert config.effective_noise_variance() is None

    def test_variance_options_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["--noise-variance", "0.01", "--estimate-noise"])


class TestMain:
    """Test complete runs of the driver."""

    def teardown_method(self):
        logging_manager.shutdown()

    def test_identity_run_saves_figures(self, image_file, tmp_path):
        out_dir = tmp_path / "figures"

        code = main(
            [
                "--image", str(image_file),
                "--ai-model", "identity",
                "--seed", "0",
                "--no-show",
                "--save-dir", str(out_dir),
            ]
        )

        assert code == 0
        assert (out_dir / "denoising_comparison.png").exists()
        assert (out_dir / "quality_metrics.png").exists()

    def test_missing_image_exits_with_error(self, tmp_path):
        code = main(["--image", str(tmp_path / "missing.png"), "--no-show"])
        assert code == 1

    def test_invalid_window_exits_with_error(self, image_file):
        code = main(
            ["--image", str(image_file), "--window", "4", "--ai-model", "identity", "--no-show"]
        )
        assert code == 1

    def test_yaml_exponent_float(self, image_file, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("noise_sigma: 1e-2\nai_model: identity\n")

        code = main(["--config", str(path), "--image", str(image_file), "--no-show"])

        assert code == 0

    def test_malformed_yaml_value_exits_with_error(self, image_file, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("noise_sigma: abc\nai_model: null\n")

        code = main(["--config", str(path), "--image", str(image_file), "--no-show"])

        assert code == 1
