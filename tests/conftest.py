"""Shared pytest setup."""

import sys
from pathlib import Path

import matplotlib

# Figures are rendered off-screen in tests
matplotlib.use("Agg")

sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest


@pytest.fixture
def gradient_image():
    """64x64 horizontal ramp with a bright square."""
    image = np.tile(np.linspace(0.1, 0.9, 64), (64, 1))
    image[20:44, 20:44] = 0.95
    return image


@pytest.fixture
def flat_image():
    return np.full((32, 32), 0.5)
