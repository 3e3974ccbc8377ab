# -*- coding: utf-8 -*-
"""Basic statistics and printable summaries for vector and raster layers."""

import numpy as np


def _describe_values(values, prefix=""):
    values = np.asarray(values, dtype=float)
    values = values[~np.isnan(values)]

    stats = {f"{prefix}count": int(values.size)}
    if values.size == 0:
        return stats

    stats.update(
        {
            f"{prefix}min": float(values.min()),
            f"{prefix}max": float(values.max()),
            f"{prefix}mean": float(values.mean()),
            f"{prefix}median": float(np.median(values)),
            f"{prefix}std": float(values.std(ddof=1)) if values.size > 1 else 0.0,
            f"{prefix}sum": float(values.sum()),
        }
    )

    percentiles = [10, 25, 50, 75, 90]
    for p in percentiles:
        stats[f"{prefix}percentile_{p}"] = float(np.percentile(values, p))

    return stats


def attach_basic_stats(layer, column=None, band=None, prefix=None):
    """Calculate basic statistics for an attribute column or a raster band.

    Parameters:
    -----------
    layer : Layer
        Layer to calculate statistics for
    column : str, optional
        Attribute column of a vector layer
    band : int, optional
        Band index of a raster layer; nodata cells are ignored
    prefix : str, optional
        Prefix for result names

    Returns:
    --------
    stats : dict
        Dictionary with calculated statistics
    """
    prefix = f"{prefix}_" if prefix else ""

    if column is not None:
        if layer.objects is None or column not in layer.objects.columns:
            raise ValueError(f"Column '{column}' not found in layer objects")
        return _describe_values(layer.objects[column], prefix)

    if band is not None:
        if layer.raster is None:
            raise ValueError(f"Layer '{layer.name}' has no raster data")
        if not 0 <= band < layer.count:
            raise ValueError(f"Band index {band} out of range for a layer with {layer.count} band(s)")
        return _describe_values(layer.masked(band).ravel(), prefix)

    raise ValueError("Either a column or a band must be given")


def describe_layer(layer):
    """Summarize a layer the way a slide prints it.

    Returns:
    --------
    summary : dict
        CRS, bounds and size; per-band statistics for rasters, columns and geometry types for vectors
    """
    summary = {
        "name": layer.name,
        "type": layer.type,
        "crs": str(layer.crs) if layer.crs is not None else None,
        "bounds": layer.bounds,
    }

    if layer.is_raster:
        summary.update(
            {
                "bands": layer.count,
                "shape": layer.shape,
                "resolution": layer.resolution,
                "nodata": layer.nodata,
                "band_stats": {
                    band_name: attach_basic_stats(layer, band=i) for i, band_name in enumerate(layer.band_names)
                },
            }
        )
    else:
        objects = layer.objects
        summary.update(
            {
                "features": len(objects),
                "columns": [col for col in objects.columns if col != objects.geometry.name],
                "geometry_types": sorted(objects.geom_type.dropna().unique().tolist()),
            }
        )

    return summary
