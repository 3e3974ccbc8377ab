# -*- coding: utf-8 -*-
"""Helpers that generate small offline datasets, so the deck and the tests run without downloads."""

import geopandas as gpd
import numpy as np
from rasterio.crs import CRS
from rasterio.transform import from_origin
from shapely.geometry import box

from ..core.layer import Layer

# name, subregion, pop_est, (minx, miny, maxx, maxy) rough bounding boxes in degrees
EUROPE_SAMPLE = [
    ("France", "Western Europe", 67_059_887, (-4.8, 42.3, 8.2, 51.1)),
    ("Germany", "Western Europe", 83_132_799, (5.9, 47.3, 15.0, 55.1)),
    ("Belgium", "Western Europe", 11_484_055, (2.5, 49.5, 6.4, 51.5)),
    ("Netherlands", "Western Europe", 17_332_850, (3.3, 50.8, 7.2, 53.5)),
    ("Austria", "Western Europe", 8_877_067, (9.5, 46.4, 17.2, 49.0)),
    ("Switzerland", "Western Europe", 8_574_832, (6.0, 45.8, 10.5, 47.8)),
    ("Luxembourg", "Western Europe", 619_896, (5.7, 49.4, 6.5, 50.2)),
    ("Spain", "Southern Europe", 47_076_781, (-9.4, 36.0, 3.3, 43.8)),
    ("Italy", "Southern Europe", 59_729_081, (6.6, 36.6, 18.5, 47.1)),
    ("Portugal", "Southern Europe", 10_269_417, (-9.5, 37.0, -6.2, 42.2)),
    ("Poland", "Eastern Europe", 37_970_874, (14.1, 49.0, 24.1, 54.8)),
    ("Czechia", "Eastern Europe", 10_669_709, (12.1, 48.6, 18.9, 51.1)),
    ("Sweden", "Northern Europe", 10_285_453, (11.0, 55.3, 24.2, 69.1)),
    ("Norway", "Northern Europe", 5_347_896, (4.9, 58.0, 31.1, 71.2)),
]

MONTHS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]


def create_sample_countries(name="countries"):
    """Create a vector layer of European countries with subregion and population attributes.

    Returns:
    --------
    layer : Layer
        Vector layer in EPSG:4326 with columns ``name``, ``subregion`` and ``pop_est``
    """
    gdf = gpd.GeoDataFrame(
        {
            "name": [row[0] for row in EUROPE_SAMPLE],
            "subregion": [row[1] for row in EUROPE_SAMPLE],
            "pop_est": [row[2] for row in EUROPE_SAMPLE],
        },
        geometry=[box(*row[3]) for row in EUROPE_SAMPLE],
        crs="EPSG:4326",
    )
    return Layer.from_objects(gdf, name=name, metadata={"source": "sample"})


def create_sample_data(resolution=0.5, bounds=(-10.0, 35.0, 30.0, 70.0), seed=42, name="tavg"):
    """Create a synthetic 12-band monthly temperature grid over Europe.

    Temperatures fall with latitude and follow a seasonal cycle, with a little noise on top.

    Parameters:
    -----------
    resolution : float
        Cell size in degrees
    bounds : tuple
        (minx, miny, maxx, maxy) of the grid in EPSG:4326
    seed : int
        Seed of the noise generator

    Returns:
    --------
    layer : Layer
        Raster layer with one band per month and nodata -9999
    """
    minx, miny, maxx, maxy = bounds
    width = int(round((maxx - minx) / resolution))
    height = int(round((maxy - miny) / resolution))
    transform = from_origin(minx, maxy, resolution, resolution)

    rng = np.random.default_rng(seed)
    lats = maxy - (np.arange(height) + 0.5) * resolution
    base = 30.0 - 0.5 * lats[:, np.newaxis] * np.ones((1, width))

    bands = []
    for month in range(12):
        seasonal = -10.0 * np.cos(2 * np.pi * month / 12)
        bands.append(base + seasonal + rng.normal(0, 0.5, size=(height, width)))

    data = np.stack(bands).astype("float32")
    return Layer.from_array(
        data,
        transform,
        CRS.from_epsg(4326),
        nodata=-9999.0,
        band_names=[f"{name}_{month}" for month in MONTHS],
        name=name,
        metadata={"source": "sample"},
    )
