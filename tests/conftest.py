"""Pytest fixtures for threadart tests."""

import os
import tempfile

import cv2
import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def black_image():
    """A 10x10 all-black image: every pixel starts with full debt."""
    return np.zeros((10, 10), dtype=np.uint8)


@pytest.fixture
def gradient_image():
    """A 40x40 horizontal gradient, dark on the left."""
    row = np.linspace(0, 255, 40).astype(np.uint8)
    return np.tile(row, (40, 1))


@pytest.fixture
def cross_image():
    """A white 60x60 image with a dark cross through the centre."""
    img = np.full((60, 60), 255, dtype=np.uint8)
    cv2.line(img, (5, 30), (55, 30), 0, 3)
    cv2.line(img, (30, 5), (30, 55), 0, 3)
    return img


@pytest.fixture
def default_config():
    """Default configuration scaled down for quick runs."""
    from threadart.config import ThreadArtConfig

    config = ThreadArtConfig()
    config.anchors.num_anchors = 36
    config.planner.anchor_gap_count = 2
    config.termination.num_chords = 20
    config.render.width = 120
    config.render.height = 120
    return config


@pytest.fixture
def synthetic_input_file(temp_dir, cross_image):
    """Write the cross image to disk for pipeline tests."""
    path = os.path.join(temp_dir, "cross.png")
    cv2.imwrite(path, cross_image)
    return path
