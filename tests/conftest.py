# -*- coding: utf-8 -*-
"""Shared fixtures: small synthetic vector and raster layers."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402
from rasterio.crs import CRS  # noqa: E402
from rasterio.transform import from_origin  # noqa: E402

from geoslides import Layer, create_sample_countries  # noqa: E402

from .grid import CELL, ORIGIN_X, ORIGIN_Y  # noqa: E402


@pytest.fixture(autouse=True)
def close_figures():
    """Fixture to close every matplotlib figure a test leaves open."""
    yield
    plt.close("all")


@pytest.fixture
def countries():
    """European countries sample layer in EPSG:4326."""
    return create_sample_countries()


@pytest.fixture
def grid_layer():
    """A 6x8 single-band UTM grid holding the values 0..47, row by row."""
    data = np.arange(48, dtype="float32").reshape(1, 6, 8)
    transform = from_origin(ORIGIN_X, ORIGIN_Y, CELL, CELL)
    return Layer.from_array(data, transform, CRS.from_epsg(32633), nodata=-1.0, name="grid")
