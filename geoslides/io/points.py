# -*- coding: utf-8 -*-
"""Reads plain delimited text files of point coordinates into vector layers."""

import os

import geopandas as gpd
import pandas as pd

from .. import config
from ..core.layer import Layer


def read_points(csv_path, x="lon", y="lat", crs=config.WEB_CRS, sep=",", name=None):
    """Read a delimited text file with coordinate columns into a point layer.

    Parameters:
    -----------
    csv_path : str
        Path to the text file
    x, y : str
        Names of the columns holding the x (longitude) and y (latitude) coordinates
    crs : str
        Coordinate reference system of the coordinates
    sep : str
        Column delimiter
    name : str, optional
        Name of the resulting Layer, defaults to the file stem

    Returns:
    --------
    layer : Layer
        Vector layer with one point per row; all other columns are kept as attributes
    """
    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Points file not found: {csv_path}")

    df = pd.read_csv(csv_path, sep=sep)
    missing = [col for col in (x, y) if col not in df.columns]
    if missing:
        raise ValueError(f"Coordinate column(s) {missing} not found in {csv_path}; columns are {list(df.columns)}")

    gdf = gpd.GeoDataFrame(df, geometry=gpd.points_from_xy(df[x], df[y]), crs=crs)

    if name is None:
        name = os.path.splitext(os.path.basename(csv_path))[0]

    return Layer.from_objects(gdf, name=name, metadata={"source": csv_path})
