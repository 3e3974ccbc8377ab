# -*- coding: utf-8 -*-
"""Handles raster input and output operations, including reading single files and multi-file stacks.

Multi-file stacks are discovered by glob pattern and must share extent, resolution and projection; the files are
stacked band by band into one raster Layer.
"""

import glob
import logging
import os

import numpy as np
import rasterio
from rasterio import features
from rasterio.transform import from_origin

from ..core.layer import Layer

logger = logging.getLogger(__name__)


def read_raster(raster_path):
    """Read a raster file and return its data, transform, and CRS.

    Parameters:
    -----------
    raster_path : str
        Path to the raster file

    Returns:
    --------
    image_data : numpy.ndarray
        Array with raster data values (bands, height, width)
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    """
    if not os.path.exists(raster_path):
        raise FileNotFoundError(f"Raster file not found: {raster_path}")

    with rasterio.open(raster_path) as src:
        image_data = src.read()
        transform = src.transform
        crs = src.crs

    return image_data, transform, crs


def read_raster_layer(raster_path, name=None):
    """Read a raster file into a raster Layer, keeping nodata and band descriptions."""
    if not os.path.exists(raster_path):
        raise FileNotFoundError(f"Raster file not found: {raster_path}")

    with rasterio.open(raster_path) as src:
        data = src.read()
        transform = src.transform
        crs = src.crs
        nodata = src.nodata
        descriptions = src.descriptions

    stem = os.path.splitext(os.path.basename(raster_path))[0]
    if name is None:
        name = stem

    if data.shape[0] == 1:
        band_names = [descriptions[0] or stem]
    else:
        band_names = [desc or f"{stem}_{i + 1}" for i, desc in enumerate(descriptions)]

    logger.debug("Read %s: %d band(s), %dx%d, crs=%s", raster_path, data.shape[0], data.shape[1], data.shape[2], crs)

    return Layer.from_array(
        data,
        transform,
        crs,
        nodata=nodata,
        band_names=band_names,
        name=name,
        metadata={"source": raster_path},
    )


def _same_nodata(a, b):
    return a == b or (np.isnan(a) and np.isnan(b))


def read_raster_stack(pattern_or_paths, name=None):
    """Stack several raster files sharing one grid into a single multi-band layer.

    Parameters:
    -----------
    pattern_or_paths : str or list of str
        Glob pattern (e.g. "data/wc2.1_10m_tavg_*.tif") or explicit list of files
    name : str, optional
        Name of the resulting Layer

    Returns:
    --------
    layer : Layer
        Raster layer with the bands of all files, in sorted file order
    """
    if isinstance(pattern_or_paths, str):
        paths = sorted(glob.glob(pattern_or_paths))
    else:
        paths = list(pattern_or_paths)

    if not paths:
        raise FileNotFoundError(f"No raster files match {pattern_or_paths!r}")

    layers = [read_raster_layer(path) for path in paths]
    first = layers[0]

    for layer in layers[1:]:
        source = layer.metadata["source"]
        if layer.shape != first.shape:
            raise ValueError(f"{source} has shape {layer.shape}, expected {first.shape}")
        if not layer.transform.almost_equals(first.transform):
            raise ValueError(f"{source} does not share the extent and resolution of {first.metadata['source']}")
        if layer.crs != first.crs:
            raise ValueError(f"{source} has CRS {layer.crs}, expected {first.crs}")

    # files may flag missing cells differently; the stack uses the first nodata value found
    nodata = next((layer.nodata for layer in layers if layer.nodata is not None), None)
    bands = []
    for layer in layers:
        data = layer.raster
        if layer.nodata is not None and not _same_nodata(layer.nodata, nodata):
            logger.info("Remapping nodata %s of %s to %s", layer.nodata, layer.metadata["source"], nodata)
            missing = np.isnan(data) if np.isnan(layer.nodata) else data == layer.nodata
            data = np.where(missing, nodata, data)
        bands.append(data)

    data = np.concatenate(bands, axis=0)
    band_names = [band for layer in layers for band in layer.band_names]

    return Layer.from_array(
        data,
        first.transform,
        first.crs,
        nodata=nodata,
        band_names=band_names,
        name=name or "stack",
        metadata={"sources": paths},
    )


def write_raster(output_path, data, transform, crs, nodata=None, band_names=None, compress=None):
    """Write raster data to a GeoTIFF file.

    Parameters:
    -----------
    output_path : str
        Path to the output raster file
    data : numpy.ndarray
        Array with raster data values
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    nodata : int or float, optional
        No data value
    band_names : list of str, optional
        Stored as band descriptions
    compress : str, optional
        GeoTIFF compression, e.g. "deflate" or "lzw"
    """
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if len(data.shape) == 2:
        data = data.reshape(1, *data.shape)

    height, width = data.shape[-2], data.shape[-1]
    count = data.shape[0]

    options = {"compress": compress} if compress else {}

    with rasterio.open(
        output_path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=count,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
        **options,
    ) as dst:
        dst.write(data)
        if band_names:
            for i, band_name in enumerate(band_names, start=1):
                dst.set_band_description(i, band_name)


def layer_to_raster(layer, output_path, column=None, nodata=0, resolution=None, compress=None):
    """Save a layer to a raster file.

    Parameters:
    -----------
    layer : Layer
        Layer to save
    output_path : str
        Path to the output raster file
    column : str, optional
        Column to rasterize (if saving from vector objects)
    nodata : int or float, optional
        No data value used for rasterized output
    resolution : float, optional
        Cell size for rasterized output; defaults to 1/100 of the larger layer dimension
    compress : str, optional
        GeoTIFF compression
    """
    if layer.raster is not None and column is None:
        write_raster(
            output_path,
            layer.raster,
            layer.transform,
            layer.crs,
            layer.nodata,
            band_names=layer.band_names,
            compress=compress,
        )
        return

    if layer.objects is not None and column is not None:
        if column not in layer.objects.columns:
            raise ValueError(f"Column '{column}' not found in layer objects")

        objects = layer.objects
        col_values = objects[column]
        if np.issubdtype(col_values.dtype, np.number):
            shapes = [(geom, float(val)) for geom, val in zip(objects.geometry, col_values, strict=False)]
        else:
            unique_vals = col_values.unique()
            val_map = {val: idx + 1 for idx, val in enumerate(unique_vals)}
            logger.info("Mapping categorical values: %s", val_map)
            shapes = [(geom, val_map[val]) for geom, val in zip(objects.geometry, col_values, strict=False)]

        minx, miny, maxx, maxy = objects.total_bounds
        if resolution is None:
            if maxx == minx and maxy == miny:
                raise ValueError("Objects have no extent (e.g. a single point); pass an explicit resolution")
            resolution = max(maxx - minx, maxy - miny) / 100
        width = max(int(np.ceil((maxx - minx) / resolution)), 1)
        height = max(int(np.ceil((maxy - miny) / resolution)), 1)
        transform = from_origin(minx, maxy, resolution, resolution)

        output = features.rasterize(
            shapes,
            out_shape=(height, width),
            transform=transform,
            fill=nodata,
            dtype="float32",
        )

        write_raster(output_path, output, transform, objects.crs, nodata, band_names=[column], compress=compress)
    else:
        raise ValueError("Layer must have either raster data or objects with a specified column")
