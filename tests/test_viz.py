# -*- coding: utf-8 -*-
"""Tests for static plots, level plots and interactive maps."""

import folium
import numpy as np
import pytest
from folium.raster_layers import ImageOverlay
from matplotlib.figure import Figure
from rasterio.crs import CRS
from rasterio.transform import from_origin
from rasterio.warp import transform_bounds

from geoslides import (
    Layer,
    create_sample_data,
    map_interactive,
    plot_histogram,
    plot_layer,
    plot_levels,
    save_map,
)


def test_plot_vector_attribute(countries):
    fig = plot_layer(countries, attribute="pop_est")
    assert isinstance(fig, Figure)
    assert fig.axes[0].get_title() == "countries: pop_est"

    with pytest.raises(ValueError, match="not found"):
        plot_layer(countries, attribute="gdp")


def test_plot_raster_with_overlay(grid_layer, countries):
    fig = plot_layer(grid_layer, overlay=countries, title="Grid")
    assert fig.axes[0].get_title() == "Grid"
    # image axes plus colorbar
    assert len(fig.axes) == 2


def test_plot_levels():
    tavg = create_sample_data(resolution=2.0)
    fig = plot_levels(tavg, ncols=5)

    visible = [ax for ax in fig.axes if ax.get_visible() and ax.get_title()]
    assert [ax.get_title() for ax in visible] == tavg.band_names
    assert fig._suptitle.get_text() == "tavg"

    with pytest.raises(ValueError, match="raster layer"):
        plot_levels(Layer(type="vector"))


def test_plot_histogram(grid_layer, countries):
    fig = plot_histogram(grid_layer)
    assert fig.axes[0].get_xlabel() == "band_1"

    fig = plot_histogram(countries, attribute="pop_est", by_class="subregion")
    assert fig.axes[0].get_legend() is not None

    with pytest.raises(ValueError):
        plot_histogram(countries, attribute="gdp")


def test_interactive_vector_map(tmp_path, countries):
    fmap = map_interactive(countries, attribute="pop_est")
    assert isinstance(fmap, folium.Map)

    path = save_map(fmap, str(tmp_path / "maps" / "countries.html"))
    html = open(path, encoding="utf-8").read()
    assert "leaflet" in html.lower()
    assert "Germany" in html


def test_interactive_raster_map(grid_layer):
    fmap = map_interactive(grid_layer)
    children = list(fmap._children.values())
    assert any(isinstance(child, ImageOverlay) for child in children)


def test_interactive_map_requires_crs(grid_layer):
    no_crs = Layer.from_array(grid_layer.raster, grid_layer.transform, None)
    with pytest.raises(ValueError, match="no CRS"):
        map_interactive(no_crs)


def test_interactive_map_colors_categories(countries):
    fmap = map_interactive(countries, attribute="subregion")
    geojson = next(child for child in fmap._children.values() if isinstance(child, folium.GeoJson))

    fills = {}
    for feature in geojson.data["features"]:
        subregion = feature["properties"]["subregion"]
        fills.setdefault(subregion, set()).add(geojson.style_function(feature)["fillColor"])

    assert all(len(colors) == 1 for colors in fills.values())
    assert len({colors.pop() for colors in fills.values()}) == 4


def test_interactive_map_warps_projected_raster():
    # 200 km x 400 km UTM grid well east of the zone's central meridian
    data = np.arange(5000, dtype="float32").reshape(1, 100, 50)
    layer = Layer.from_array(data, from_origin(700000, 5200000, 4000, 4000), CRS.from_epsg(32633), name="utm")

    fmap = map_interactive(layer)
    overlay = next(child for child in fmap._children.values() if isinstance(child, ImageOverlay))
    (south, west), (north, east) = overlay.bounds

    expected_west, expected_south, expected_east, expected_north = transform_bounds(
        layer.crs, "EPSG:4326", *layer.bounds
    )
    assert west == pytest.approx(expected_west, abs=0.1)
    assert east == pytest.approx(expected_east, abs=0.1)
    assert south == pytest.approx(expected_south, abs=0.1)
    assert north == pytest.approx(expected_north, abs=0.1)
