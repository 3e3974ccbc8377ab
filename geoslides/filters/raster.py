# -*- coding: utf-8 -*-
"""Raster transformations: assigning and changing projections, cropping, aggregating and extracting cell values.

Every transformation returns a new Layer whose parent is the source layer; the source is never modified. Cell values
flagged as nodata are treated as missing throughout.
"""

import logging
import warnings

import geopandas as gpd
import numpy as np
import pandas as pd
from affine import Affine
from rasterio.crs import CRS
from rasterio.warp import Resampling, calculate_default_transform, reproject
from rasterio.windows import Window
from rasterio.windows import transform as window_transform

from ..core.layer import Layer

logger = logging.getLogger(__name__)

REDUCERS = {
    "mean": np.nanmean,
    "sum": np.nansum,
    "min": np.nanmin,
    "max": np.nanmax,
    "median": np.nanmedian,
}

REMAINDER_POLICIES = ("error", "expand", "trim")

# tolerance, in cells, for bounds that fall exactly on a cell edge
_EDGE_EPS = 1e-9


def _require_raster(layer):
    if layer.raster is None:
        raise ValueError(f"Layer '{layer.name}' has no raster data")


def _derived(source_layer, data, transform, crs, nodata, layer_name, suffix, metadata):
    return Layer.from_array(
        data,
        transform,
        crs,
        nodata=nodata,
        band_names=source_layer.band_names,
        name=layer_name or f"{source_layer.name}_{suffix}",
        parent=source_layer,
        metadata=metadata,
    )


def _restore_nodata(values, nodata):
    """Turn NaN back into the nodata value, returning the array and the nodata to store."""
    if nodata is None or np.isnan(nodata):
        return values, np.nan
    return np.where(np.isnan(values), nodata, values), nodata


def set_raster_crs(source_layer, crs, layer_name=None):
    """Assign a coordinate reference system to a raster without transforming its cells.

    Parameters:
    -----------
    source_layer : Layer
        Raster layer whose CRS is unset or wrong
    crs : str or rasterio.crs.CRS
        e.g. "EPSG:4326" or a PROJ string; an invalid definition raises a CRSError

    Returns:
    --------
    result_layer : Layer
        Copy of the layer carrying the new CRS
    """
    _require_raster(source_layer)

    return _derived(
        source_layer,
        source_layer.raster.copy(),
        source_layer.transform,
        CRS.from_user_input(crs),
        source_layer.nodata,
        layer_name,
        "crs",
        {"operation": "set_crs", "crs": str(crs)},
    )


def reproject_raster(source_layer, dst_crs, resolution=None, resampling="nearest", layer_name=None):
    """Warp a raster layer to another coordinate reference system.

    Parameters:
    -----------
    source_layer : Layer
        Raster layer with a CRS
    dst_crs : str or rasterio.crs.CRS
        Target coordinate reference system
    resolution : float or tuple, optional
        Target cell size in target CRS units; derived from the source if omitted
    resampling : str
        Name of a rasterio Resampling method, e.g. "nearest", "bilinear"

    Returns:
    --------
    result_layer : Layer
        Reprojected raster layer (float64, nodata NaN unless the source defines one)
    """
    _require_raster(source_layer)
    if source_layer.crs is None:
        raise ValueError(f"Layer '{source_layer.name}' has no CRS; assign one with set_raster_crs first")

    dst_crs = CRS.from_user_input(dst_crs)
    count = source_layer.count
    height, width = source_layer.shape

    kwargs = {"resolution": resolution} if resolution is not None else {}
    dst_transform, dst_width, dst_height = calculate_default_transform(
        source_layer.crs, dst_crs, width, height, *source_layer.bounds, **kwargs
    )

    src_data = source_layer.masked()
    destination = np.full((count, dst_height, dst_width), np.nan, dtype="float64")

    for i in range(count):
        reproject(
            source=src_data[i],
            destination=destination[i],
            src_transform=source_layer.transform,
            src_crs=source_layer.crs,
            src_nodata=np.nan,
            dst_transform=dst_transform,
            dst_crs=dst_crs,
            dst_nodata=np.nan,
            resampling=Resampling[resampling],
        )

    destination, nodata = _restore_nodata(destination, source_layer.nodata)
    logger.debug("Reprojected '%s' from %s to %s", source_layer.name, source_layer.crs, dst_crs)

    return _derived(
        source_layer,
        destination,
        dst_transform,
        dst_crs,
        nodata,
        layer_name,
        "reprojected",
        {"operation": "reproject", "crs": dst_crs.to_string(), "resampling": resampling},
    )


def crop(source_layer, bounds, layer_name=None):
    """Crop a raster layer to a bounding extent.

    The requested extent is snapped outward to whole source cells and then clipped to the source extent, so the
    result never reaches beyond the source grid.

    Parameters:
    -----------
    source_layer : Layer
        Raster layer to crop
    bounds : tuple
        (minx, miny, maxx, maxy) in the layer's CRS

    Returns:
    --------
    result_layer : Layer
        Cropped raster layer
    """
    _require_raster(source_layer)

    minx, miny, maxx, maxy = bounds
    if minx >= maxx or miny >= maxy:
        raise ValueError(f"Invalid extent {bounds}: min must be smaller than max")

    transform = source_layer.transform
    if transform.b != 0 or transform.d != 0:
        raise ValueError("Cropping rotated rasters is not supported")

    height, width = source_layer.shape
    xres, yres = transform.a, -transform.e
    x0, y0 = transform.c, transform.f

    col_start = max(int(np.floor((minx - x0) / xres + _EDGE_EPS)), 0)
    col_stop = min(int(np.ceil((maxx - x0) / xres - _EDGE_EPS)), width)
    row_start = max(int(np.floor((y0 - maxy) / yres + _EDGE_EPS)), 0)
    row_stop = min(int(np.ceil((y0 - miny) / yres - _EDGE_EPS)), height)

    if col_stop <= col_start or row_stop <= row_start:
        raise ValueError(f"Extent {bounds} does not overlap the raster extent {source_layer.bounds}")

    window = Window(col_start, row_start, col_stop - col_start, row_stop - row_start)
    data = source_layer.raster[:, row_start:row_stop, col_start:col_stop].copy()

    return _derived(
        source_layer,
        data,
        window_transform(window, transform),
        source_layer.crs,
        source_layer.nodata,
        layer_name,
        "cropped",
        {"operation": "crop", "bounds": tuple(bounds)},
    )


def _valid_cells_only(func):
    """Wrap a reducer so it only ever sees the valid (non-NaN) cells of each block."""

    def reducer(blocks, axis=-1):
        def reduce_block(values):
            values = values[~np.isnan(values)]
            return func(values) if values.size else np.nan

        return np.apply_along_axis(reduce_block, axis, blocks)

    return reducer


def aggregate(source_layer, factor, fun="mean", remainder="error", layer_name=None):
    """Coarsen a raster layer by combining blocks of cells.

    Parameters:
    -----------
    source_layer : Layer
        Raster layer to aggregate
    factor : int or tuple of int
        Block size; a single int applies to both dimensions, a tuple is (rows, cols)
    fun : str or callable
        "mean", "sum", "min", "max", "median", or a callable reducing a 1-D array of the valid cells of a block
        to a single value (e.g. ``np.std``)
    remainder : str
        What to do when the factor does not divide the grid:
        "error" raises, "expand" pads partial blocks with nodata, "trim" drops them

    Returns:
    --------
    result_layer : Layer
        Raster layer whose cells are ``factor`` times larger in each dimension
    """
    _require_raster(source_layer)

    if isinstance(factor, (tuple, list)):
        fy, fx = (int(f) for f in factor)
    else:
        fy = fx = int(factor)
    if fy < 1 or fx < 1:
        raise ValueError(f"Aggregation factor must be at least 1, got {factor}")

    if remainder not in REMAINDER_POLICIES:
        raise ValueError(f"Unknown remainder policy '{remainder}', expected one of {REMAINDER_POLICIES}")

    reducer = REDUCERS.get(fun) if isinstance(fun, str) else _valid_cells_only(fun)
    if reducer is None:
        raise ValueError(f"Unknown aggregation function '{fun}', expected one of {sorted(REDUCERS)}")

    height, width = source_layer.shape
    data = source_layer.masked()

    if height % fy or width % fx:
        if remainder == "error":
            raise ValueError(f"Factor ({fy}, {fx}) does not evenly divide a {height}x{width} grid")
        if remainder == "expand":
            pad_rows = -height % fy
            pad_cols = -width % fx
            data = np.pad(data, ((0, 0), (0, pad_rows), (0, pad_cols)), constant_values=np.nan)
        else:
            data = data[:, : height - height % fy, : width - width % fx]

    count, rows, cols = data.shape
    out_rows, out_cols = rows // fy, cols // fx
    if out_rows == 0 or out_cols == 0:
        raise ValueError(f"Factor ({fy}, {fx}) leaves no cells in a {height}x{width} grid")

    blocks = data.reshape(count, out_rows, fy, out_cols, fx).transpose(0, 1, 3, 2, 4)
    blocks = blocks.reshape(count, out_rows, out_cols, fy * fx)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=RuntimeWarning)
        reduced = np.asarray(reducer(blocks, axis=-1), dtype="float64")
    reduced[np.all(np.isnan(blocks), axis=-1)] = np.nan

    reduced, nodata = _restore_nodata(reduced, source_layer.nodata)

    return _derived(
        source_layer,
        reduced,
        source_layer.transform * Affine.scale(fx, fy),
        source_layer.crs,
        nodata,
        layer_name,
        "aggregated",
        {
            "operation": "aggregate",
            "factor": (fy, fx),
            "fun": fun if isinstance(fun, str) else getattr(fun, "__name__", repr(fun)),
            "remainder": remainder,
        },
    )


def _point_coordinates(points, crs):
    if isinstance(points, Layer):
        points = points.objects

    if isinstance(points, gpd.GeoDataFrame):
        if points.crs is not None and crs is not None and CRS.from_user_input(points.crs) != crs:
            points = points.to_crs(crs)
        if not (points.geom_type == "Point").all():
            raise ValueError("Values can only be extracted at point geometries")
        return points.geometry.x.to_numpy(), points.geometry.y.to_numpy(), points.index

    coords = np.asarray(points, dtype=float)
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise ValueError("Points must be a GeoDataFrame, a vector Layer or a sequence of (x, y) pairs")
    return coords[:, 0], coords[:, 1], pd.RangeIndex(len(coords))


def extract_values(source_layer, points):
    """Read the cell values of every band at a set of point locations.

    Parameters:
    -----------
    source_layer : Layer
        Raster layer to sample
    points : Layer, geopandas.GeoDataFrame or sequence of (x, y)
        Point locations; GeoDataFrames in another CRS are reprojected to the raster CRS

    Returns:
    --------
    values : pandas.DataFrame
        One row per point, one column per band; NaN outside the grid or on nodata cells
    """
    _require_raster(source_layer)

    xs, ys, index = _point_coordinates(points, source_layer.crs)
    height, width = source_layer.shape

    inverse = ~source_layer.transform
    cols = np.floor(inverse.a * xs + inverse.b * ys + inverse.c).astype(int)
    rows = np.floor(inverse.d * xs + inverse.e * ys + inverse.f).astype(int)
    inside = (rows >= 0) & (rows < height) & (cols >= 0) & (cols < width)

    data = source_layer.masked()
    values = np.full((len(xs), source_layer.count), np.nan)
    values[inside] = data[:, rows[inside], cols[inside]].T

    return pd.DataFrame(values, columns=source_layer.band_names, index=index)
