# -*- coding: utf-8 -*-
"""Tests for vector I/O and the table-style vector operations."""

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from pyproj.exceptions import CRSError
from shapely.geometry import Point, box

from geoslides import (
    Layer,
    filter_rows,
    from_legacy,
    group_summarize,
    layer_to_vector,
    mutate,
    read_points,
    read_vector,
    reproject_vector,
    select_columns,
    set_vector_crs,
    to_legacy,
    write_vector,
)
from geoslides.utils.helpers import EUROPE_SAMPLE

WESTERN = [row for row in EUROPE_SAMPLE if row[1] == "Western Europe"]


@pytest.mark.parametrize("extension", [".gpkg", ".geojson", ".shp"])
def test_vector_roundtrip(tmp_path, countries, extension):
    path = tmp_path / "out" / f"countries{extension}"
    write_vector(countries, str(path))

    layer = read_vector(str(path))
    assert layer.name == "countries"
    assert layer.objects.crs.to_epsg() == 4326
    assert list(layer.objects["name"]) == list(countries.objects["name"])
    assert list(layer.objects["pop_est"]) == list(countries.objects["pop_est"])
    for read_geom, geom in zip(layer.objects.geometry, countries.objects.geometry):
        assert read_geom.symmetric_difference(geom).area == pytest.approx(0, abs=1e-9)


def test_read_missing_vector(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_vector(str(tmp_path / "nope.gpkg"))


def test_write_unsupported_format(tmp_path, countries):
    with pytest.raises(ValueError, match="Unsupported vector format"):
        write_vector(countries, str(tmp_path / "countries.csv"))


def test_shapefile_rejects_mixed_geometries(tmp_path):
    gdf = gpd.GeoDataFrame({"id": [1, 2]}, geometry=[Point(0, 0), box(0, 0, 1, 1)], crs="EPSG:4326")
    with pytest.raises(ValueError, match="mixed geometry types"):
        write_vector(gdf, str(tmp_path / "mixed.shp"))

    write_vector(gdf, str(tmp_path / "mixed.gpkg"))
    assert (tmp_path / "mixed.gpkg").exists()


def test_layer_to_vector_requires_objects(tmp_path, grid_layer):
    with pytest.raises(ValueError, match="no vector objects"):
        layer_to_vector(grid_layer, str(tmp_path / "grid.gpkg"))


def test_filter_western_europe(countries):
    western = filter_rows(countries, "subregion == 'Western Europe'")

    assert western.parent is countries
    assert sorted(western.objects["name"]) == sorted(row[0] for row in WESTERN)
    assert len(countries.objects) == 14


def test_group_mean_population(countries):
    western = filter_rows(countries, "subregion == 'Western Europe'")
    table = group_summarize(western, "subregion", {"pop_est": "mean"}, dissolve=False)

    assert isinstance(table, pd.DataFrame)
    assert list(table["subregion"]) == ["Western Europe"]
    assert table["pop_est"].iloc[0] == pytest.approx(np.mean([row[2] for row in WESTERN]))


def test_group_dissolves_geometries(countries):
    grouped = group_summarize(countries, "subregion", {"pop_est": "sum"})

    assert isinstance(grouped, Layer)
    assert len(grouped.objects) == 4
    totals = dict(zip(grouped.objects["subregion"], grouped.objects["pop_est"]))
    assert totals["Western Europe"] == sum(row[2] for row in WESTERN)
    assert grouped.objects.crs == countries.objects.crs

    with pytest.raises(ValueError, match="not found"):
        group_summarize(countries, "continent", {"pop_est": "sum"})


def test_select_and_mutate(countries):
    selected = select_columns(countries, ["name"])
    assert list(selected.objects.columns) == ["name", "geometry"]

    mutated = mutate(countries, "pop_millions", "pop_est / 1e6")
    assert mutated.objects["pop_millions"].iloc[0] == pytest.approx(EUROPE_SAMPLE[0][2] / 1e6)
    assert "pop_millions" not in countries.objects.columns

    upper = mutate(countries, "upper", lambda gdf: gdf["name"].str.upper())
    assert upper.objects["upper"].iloc[1] == "GERMANY"

    with pytest.raises(ValueError, match="not found"):
        select_columns(countries, ["continent"])


def test_reprojection_roundtrip(countries):
    laea = reproject_vector(countries, "EPSG:3035")
    assert laea.objects.crs.to_epsg() == 3035
    assert not np.allclose(laea.objects.total_bounds, countries.objects.total_bounds)

    back = reproject_vector(laea, "EPSG:4326")
    for geom, original in zip(back.objects.geometry, countries.objects.geometry):
        np.testing.assert_allclose(np.asarray(geom.exterior.coords), np.asarray(original.exterior.coords), atol=1e-6)


def test_reproject_requires_crs(countries):
    objects = countries.objects
    no_crs = Layer.from_objects(gpd.GeoDataFrame(objects.drop(columns="geometry"), geometry=list(objects.geometry)))
    with pytest.raises(ValueError, match="has no CRS"):
        reproject_vector(no_crs, "EPSG:3035")

    fixed = set_vector_crs(no_crs, "EPSG:4326")
    assert fixed.objects.crs.to_epsg() == 4326


def test_reproject_invalid_crs(countries):
    with pytest.raises(CRSError):
        reproject_vector(countries, "EPSG:not-a-code")


def test_legacy_roundtrip(countries):
    legacy = to_legacy(countries)

    assert not isinstance(legacy, gpd.GeoDataFrame)
    assert legacy["wkt"].iloc[0].startswith("POLYGON")
    assert legacy.attrs["crs"] == "EPSG:4326"

    restored = from_legacy(legacy)
    assert restored.objects.crs.to_epsg() == 4326
    assert list(restored.objects["name"]) == list(countries.objects["name"])
    assert restored.objects.geometry.iloc[0].equals(countries.objects.geometry.iloc[0])

    with pytest.raises(ValueError, match="WKT column"):
        from_legacy(legacy.drop(columns="wkt"))


def test_read_points(tmp_path):
    path = tmp_path / "points.csv"
    path.write_text("city,lon,lat\nParis,2.35,48.86\nBerlin,13.40,52.52\n")

    layer = read_points(str(path))
    assert layer.name == "points"
    assert layer.objects.crs.to_epsg() == 4326
    assert list(layer.objects["city"]) == ["Paris", "Berlin"]
    assert layer.objects.geometry.iloc[1].x == pytest.approx(13.40)

    with pytest.raises(ValueError, match="Coordinate column"):
        read_points(str(path), x="x", y="y")
