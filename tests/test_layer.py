# -*- coding: utf-8 -*-
"""Tests for the Layer container, the LayerManager and the summary statistics."""

import numpy as np
import pytest

from geoslides import Layer, LayerManager, attach_basic_stats, describe_layer

from .grid import CELL, ORIGIN_X, ORIGIN_Y


def test_raster_layer_geometry(grid_layer):
    assert grid_layer.is_raster
    assert grid_layer.count == 1
    assert grid_layer.shape == (6, 8)
    assert grid_layer.resolution == (CELL, CELL)
    assert grid_layer.bounds == (ORIGIN_X, ORIGIN_Y - 60, ORIGIN_X + 80, ORIGIN_Y)
    assert grid_layer.band_names == ["band_1"]


def test_from_array_accepts_2d_and_checks_band_names(grid_layer):
    layer = Layer.from_array(np.zeros((3, 4)), grid_layer.transform, grid_layer.crs)
    assert layer.raster.shape == (1, 3, 4)

    with pytest.raises(ValueError, match="band names"):
        Layer.from_array(np.zeros((2, 3, 4)), grid_layer.transform, grid_layer.crs, band_names=["only_one"])


def test_unknown_layer_type():
    with pytest.raises(ValueError, match="Unknown layer type"):
        Layer(type="segmentation")


def test_masked_replaces_nodata(grid_layer):
    grid_layer.raster[0, 0, 0] = -1
    masked = grid_layer.masked(0)
    assert np.isnan(masked[0, 0])
    assert masked[0, 1] == 1


def test_copy_is_independent(grid_layer):
    grid_layer.metadata["note"] = {"a": 1}
    copied = grid_layer.copy()
    copied.raster[0, 0, 0] = 99
    copied.metadata["note"]["a"] = 2

    assert grid_layer.raster[0, 0, 0] == 0
    assert grid_layer.metadata["note"]["a"] == 1
    assert copied.name == "grid_copy"


def test_vector_layer_str(countries):
    assert countries.count == 14
    assert "type: vector" in str(countries)
    assert "features: 14" in str(countries)


def test_attach_function(countries):
    countries.attach_function(attach_basic_stats, name="pop_stats", column="pop_est")
    stats = countries.get_function_result("pop_stats")
    assert stats["count"] == 14
    assert stats["max"] == countries.objects["pop_est"].max()

    with pytest.raises(ValueError, match="not attached"):
        countries.get_function_result("missing")


def test_manager_lookup_and_replace(countries, grid_layer):
    manager = LayerManager()
    manager.add_layer(countries)
    manager.add_layer(grid_layer)

    assert manager.has_layer("countries")
    assert manager.get_layer(grid_layer.id) is grid_layer
    assert manager.get_layer_names() == ["countries", "grid"]
    assert manager.active_layer is grid_layer

    replacement = grid_layer.copy()
    replacement.name = "grid"
    manager.add_layer(replacement)
    assert manager.get_layer("grid") is replacement
    assert len(manager.layers) == 2

    manager.remove_layer("grid")
    assert manager.active_layer is countries
    with pytest.raises(ValueError, match="not found"):
        manager.get_layer("grid")


def test_basic_stats_ignore_nodata(grid_layer):
    grid_layer.raster[0, 0, :] = -1
    stats = attach_basic_stats(grid_layer, band=0)
    assert stats["count"] == 40
    assert stats["min"] == 8
    assert stats["max"] == 47

    with pytest.raises(ValueError, match="out of range"):
        attach_basic_stats(grid_layer, band=3)
    with pytest.raises(ValueError, match="column or a band"):
        attach_basic_stats(grid_layer)


def test_describe_layer(countries, grid_layer):
    vector_summary = describe_layer(countries)
    assert vector_summary["features"] == 14
    assert vector_summary["columns"] == ["name", "subregion", "pop_est"]
    assert vector_summary["geometry_types"] == ["Polygon"]

    raster_summary = describe_layer(grid_layer)
    assert raster_summary["bands"] == 1
    assert raster_summary["band_stats"]["band_1"]["mean"] == pytest.approx(23.5)
