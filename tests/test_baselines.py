"""
Tests for the denoisers compared by the pipeline.

DnCNN tests run on CPU with randomly initialized or locally saved weights;
nothing is downloaded.
"""

from unittest.mock import patch

import numpy as np
import pytest
import torch

from core.baselines import (
    DnCNNBaseline,
    IdentityDenoiser,
    WienerFilterBaseline,
    create_denoiser,
)
from core.exceptions import ConfigurationError, ModelError, WindowSizeError
from core.filters import adaptive_wiener_filter
from core.interfaces import Denoiser
from models.dncnn import (
    DEFAULT_WEIGHTS,
    DnCNN,
    load_pretrained_dncnn,
    resolve_device,
    resolve_weights_url,
)


class TestDenoiserInterface:
    """Test abstract denoiser functionality."""

    def test_abstract_methods(self):
        """Test that Denoiser is properly abstract."""
        with pytest.raises(TypeError):
            Denoiser("test")

    def test_call_delegates_to_denoise(self):
        denoiser = IdentityDenoiser()
        image = np.full((4, 4), 0.25)

        np.testing.assert_array_equal(denoiser(image), image)

    def test_repr_lists_parameters(self):
        baseline = WienerFilterBaseline(window_size=3, noise_variance=0.01)
        assert repr(baseline) == "WienerFilterBaseline(window_size=3, noise_variance=0.01)"


class TestWienerFilterBaseline:
    """Test the classical baseline."""

    def test_matches_filter_function(self, gradient_image):
        baseline = WienerFilterBaseline(window_size=5, noise_variance=0.002)

        expected = adaptive_wiener_filter(gradient_image, 5, noise_variance=0.002)

        np.testing.assert_allclose(baseline.denoise(gradient_image), expected)
        assert baseline.name == "Wiener"

    def test_parameters(self):
        baseline = WienerFilterBaseline(window_size=(3, 5))

        params = baseline.get_parameters()

        assert params["window_size"] == (3, 5)
        assert params["noise_variance"] is None

    def test_invalid_window(self, flat_image):
        with pytest.raises(WindowSizeError):
            WienerFilterBaseline(window_size=6).denoise(flat_image)


class TestIdentityDenoiser:
    """Test the no-op denoiser."""

    def test_returns_copy(self, gradient_image):
        denoiser = IdentityDenoiser()
        out = denoiser.denoise(gradient_image)

        np.testing.assert_array_equal(out, gradient_image)
        assert out is not gradient_image
        assert denoiser.name == "Identity"
        assert denoiser.get_parameters() == {}


class TestDnCNNNetwork:
    """Test the network definition."""

    def test_layer_layout(self):
        model = DnCNN()

        convs = [m for m in model.modules() if isinstance(m, torch.nn.Conv2d)]
        assert len(convs) == 17
        assert all(not isinstance(m, torch.nn.BatchNorm2d) for m in model.modules())

        keys = list(model.state_dict().keys())
        assert keys[0] == "model.0.weight"
        assert keys[-1] == "model.32.bias"

    def test_output_shape(self):
        model = DnCNN(num_layers=5).init_weights().eval()
        x = torch.rand(1, 1, 13, 21)

        with torch.no_grad():
            y = model(x)

        assert y.shape == x.shape

    def test_residual_learning(self):
        model = DnCNN(num_layers=3).eval()
        last = model.model[-1]
        torch.nn.init.zeros_(last.weight)
        torch.nn.init.zeros_(last.bias)
        x = torch.rand(1, 1, 8, 8)

        with torch.no_grad():
            y = model(x)

        # Zero predicted noise leaves the input untouched
        assert torch.equal(y, x)

    def test_too_shallow(self):
        with pytest.raises(ValueError):
            DnCNN(num_layers=1)

    def test_resolve_device(self):
        assert resolve_device("cpu") == torch.device("cpu")
        with patch("torch.cuda.is_available", return_value=False):
            assert resolve_device("auto") == torch.device("cpu")
            assert resolve_device("cuda") == torch.device("cpu")


class TestPretrainedLoading:
    """Test loading weights from disk and from the model zoo."""

    def setup_method(self):
        """Set up test fixtures."""
        torch.manual_seed(0)
        self.reference = DnCNN(num_layers=4).init_weights()

    def test_load_from_local_path(self, tmp_path):
        path = tmp_path / "dncnn.pth"
        torch.save(self.reference.state_dict(), path)

        model = load_pretrained_dncnn(model_path=path, num_layers=4)

        assert not model.training
        for key, value in self.reference.state_dict().items():
            assert torch.equal(model.state_dict()[key], value)

    def test_load_wrapped_checkpoint(self, tmp_path):
        wrapped = {
            "params": {f"module.{k}": v for k, v in self.reference.state_dict().items()}
        }
        path = tmp_path / "wrapped.pth"
        torch.save(wrapped, path)

        model = load_pretrained_dncnn(model_path=path, num_layers=4)

        assert torch.equal(
            model.model[0].weight, self.reference.model[0].weight
        )

    def test_depth_inferred_from_checkpoint(self, tmp_path):
        path = tmp_path / "dncnn.pth"
        torch.save(self.reference.state_dict(), path)

        model = load_pretrained_dncnn(model_path=path)

        assert model.num_layers == 4

    def test_missing_path_raises_model_error(self, tmp_path):
        with pytest.raises(ModelError, match="not found"):
            load_pretrained_dncnn(model_path=tmp_path / "missing.pth")

    def test_depth_mismatch_raises_model_error(self, tmp_path):
        path = tmp_path / "dncnn.pth"
        torch.save(self.reference.state_dict(), path)

        with pytest.raises(ModelError):
            load_pretrained_dncnn(model_path=path, num_layers=17)

    def test_download_failure_raises_model_error(self):
        with patch(
            "torch.hub.load_state_dict_from_url", side_effect=OSError("offline")
        ):
            with pytest.raises(ModelError, match="offline"):
                load_pretrained_dncnn()

    def test_download_uses_url(self):
        with patch(
            "torch.hub.load_state_dict_from_url",
            return_value=self.reference.state_dict(),
        ) as mock_load:
            load_pretrained_dncnn(weights="http://example.invalid/w.pth", num_layers=4)

        assert mock_load.call_args[0][0] == "http://example.invalid/w.pth"

    def test_default_is_blind_model(self):
        blind = DnCNN(num_layers=20).state_dict()

        with patch(
            "torch.hub.load_state_dict_from_url", return_value=blind
        ) as mock_load:
            model = load_pretrained_dncnn()

        assert DEFAULT_WEIGHTS == "dncnn_gray_blind"
        assert mock_load.call_args[0][0].endswith("/dncnn_gray_blind.pth")
        assert model.num_layers == 20

    def test_fixed_level_weights_selectable(self):
        assert resolve_weights_url("dncnn_25").endswith("/dncnn_25.pth")
        assert resolve_weights_url("https://host/w.pth") == "https://host/w.pth"

    def test_unknown_weights_name(self):
        with pytest.raises(ModelError, match="Unknown DnCNN weights"):
            load_pretrained_dncnn(weights="dncnn_99")

    def test_no_source(self):
        with pytest.raises(ModelError):
            load_pretrained_dncnn(model_path=None, weights=None)

    def test_unsupported_checkpoint(self, tmp_path):
        path = tmp_path / "list.pth"
        torch.save([1, 2, 3], path)

        with pytest.raises(ModelError, match="Unsupported checkpoint"):
            load_pretrained_dncnn(model_path=path, num_layers=4)


class TestDnCNNBaseline:
    """Test DnCNN inference on numpy images."""

    def setup_method(self):
        """Set up test fixtures."""
        torch.manual_seed(0)
        self.model = DnCNN(num_layers=5).init_weights()
        self.baseline = DnCNNBaseline(model=self.model, device="cpu", num_layers=5)

    def test_denoise_shape_range_dtype(self, gradient_image):
        out = self.baseline.denoise(gradient_image)

        assert out.shape == gradient_image.shape
        assert out.dtype == np.float64
        assert out.min() >= 0.0
        assert out.max() <= 1.0

    def test_flipped_view(self, gradient_image):
        flipped = np.fliplr(gradient_image)

        out = self.baseline.denoise(flipped)
        expected = self.baseline.denoise(flipped.copy())

        np.testing.assert_array_equal(out, expected)

    def test_model_in_eval_mode(self):
        assert not self.baseline.model.training

    def test_parameters(self):
        params = self.baseline.get_parameters()

        assert params["num_layers"] == 5
        assert params["device"] == "cpu"
        assert params["weights"] == "in-memory"
        assert self.baseline.name == "DnCNN"

    def test_inference_error_becomes_model_error(self, gradient_image):
        with patch.object(
            self.baseline, "model", side_effect=RuntimeError("CUDA out of memory")
        ):
            with pytest.raises(ModelError, match="inference failed"):
                self.baseline.denoise(gradient_image)

    def test_loads_blind_weights_by_default(self):
        with patch("core.baselines.load_pretrained_dncnn") as mock_load:
            mock_load.return_value = DnCNN(num_layers=20)
            baseline = DnCNNBaseline(device="cpu")

        assert mock_load.call_args.kwargs["weights"] == "dncnn_gray_blind"
        assert baseline.get_parameters()["num_layers"] == 20

    def test_load_failure_is_fatal(self, tmp_path):
        with pytest.raises(ModelError):
            DnCNNBaseline(model_path=tmp_path / "missing.pth", device="cpu")


class TestCreateDenoiser:
    """Test the denoiser factory."""

    def test_identity(self):
        assert isinstance(create_denoiser("identity"), IdentityDenoiser)
        assert isinstance(create_denoiser("IDENTITY"), IdentityDenoiser)

    def test_dncnn_forwards_arguments(self):
        with patch("core.baselines.DnCNNBaseline") as mock_cls:
            create_denoiser("dncnn", model_path="w.pth", device="cpu")

        mock_cls.assert_called_once()
        assert mock_cls.call_args.kwargs["model_path"] == "w.pth"
        assert mock_cls.call_args.kwargs["device"] == "cpu"
        assert mock_cls.call_args.kwargs["weights"] == "dncnn_gray_blind"

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError, match="Unknown denoiser"):
            create_denoiser("bm3d")
