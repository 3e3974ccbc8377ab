# -*- coding: utf-8 -*-
"""Manages vector data I/O, supporting Shapefile, GeoJSON and GeoPackage.

Reading returns a vector Layer; writing accepts either a Layer or a bare GeoDataFrame and picks the driver from the
file extension.
"""

import logging
import os

import geopandas as gpd

from ..core.layer import Layer

logger = logging.getLogger(__name__)

DRIVERS = {
    ".shp": "ESRI Shapefile",
    ".geojson": "GeoJSON",
    ".json": "GeoJSON",
    ".gpkg": "GPKG",
}

# Shapefiles hold one geometry family per file
_GEOMETRY_FAMILIES = {
    "Point": "point",
    "MultiPoint": "point",
    "LineString": "line",
    "MultiLineString": "line",
    "LinearRing": "line",
    "Polygon": "polygon",
    "MultiPolygon": "polygon",
}


def read_vector(vector_path, layer=None, name=None):
    """Read a vector file into a vector Layer.

    Parameters:
    -----------
    vector_path : str
        Path to the vector file
    layer : str, optional
        Layer to read from a multi-layer source such as a GeoPackage
    name : str, optional
        Name of the resulting Layer, defaults to the file stem

    Returns:
    --------
    layer : Layer
        Vector layer with the features in ``objects``
    """
    if not os.path.exists(vector_path):
        raise FileNotFoundError(f"Vector file not found: {vector_path}")

    kwargs = {"layer": layer} if layer is not None else {}
    gdf = gpd.read_file(vector_path, **kwargs)
    logger.debug("Read %d features from %s (crs=%s)", len(gdf), vector_path, gdf.crs)

    if name is None:
        name = os.path.splitext(os.path.basename(vector_path))[0]

    return Layer.from_objects(gdf, name=name, metadata={"source": vector_path})


def write_vector(gdf, output_path):
    """Write a GeoDataFrame (or a vector Layer) to a vector file.

    Parameters:
    -----------
    gdf : geopandas.GeoDataFrame or Layer
        Features to write
    output_path : str
        Path to the output vector file; the extension selects the format
    """
    if isinstance(gdf, Layer):
        gdf = gdf.objects

    file_extension = os.path.splitext(output_path)[1].lower()
    if file_extension not in DRIVERS:
        raise ValueError(f"Unsupported vector format: {file_extension}")

    if file_extension == ".shp":
        families = {_GEOMETRY_FAMILIES.get(t, t) for t in gdf.geom_type.dropna().unique()}
        if len(families) > 1:
            raise ValueError(f"Cannot write mixed geometry types {sorted(families)} to a Shapefile")

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    gdf.to_file(output_path, driver=DRIVERS[file_extension])
    logger.debug("Wrote %d features to %s", len(gdf), output_path)


def layer_to_vector(layer, output_path):
    """Save a layer's objects to a vector file.

    Parameters:
    -----------
    layer : Layer
        Layer to save
    output_path : str
        Path to the output vector file
    """
    if layer.objects is None:
        raise ValueError("Layer has no vector objects")

    write_vector(layer.objects, output_path)
