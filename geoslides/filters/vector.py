# -*- coding: utf-8 -*-
"""Table-style operations on vector layers, reprojection and conversion to a legacy geometry representation.

Select, filter, group and mutate mirror the usual data-frame verbs; each returns a new Layer derived from the
source, leaving the source untouched. The legacy representation is a plain pandas DataFrame with geometries as WKT
text, which is what older tools without geometry support exchange.
"""

import logging

import geopandas as gpd
import pandas as pd
from shapely import wkt

from ..core.layer import Layer

logger = logging.getLogger(__name__)


def _require_objects(layer):
    if layer.objects is None:
        raise ValueError(f"Layer '{layer.name}' has no vector objects")


def _derived(source_layer, objects, layer_name, suffix, metadata):
    return Layer.from_objects(
        objects,
        name=layer_name or f"{source_layer.name}_{suffix}",
        parent=source_layer,
        metadata=metadata,
    )


def select_columns(source_layer, columns, layer_name=None):
    """Keep only the given attribute columns; the geometry column is always kept."""
    _require_objects(source_layer)

    objects = source_layer.objects
    missing = [col for col in columns if col not in objects.columns]
    if missing:
        raise ValueError(f"Columns {missing} not found in layer objects")

    geometry_column = objects.geometry.name
    keep = [col for col in columns if col != geometry_column] + [geometry_column]

    return _derived(source_layer, objects[keep].copy(), layer_name, "selected", {"operation": "select", "columns": keep})


def filter_rows(source_layer, condition, layer_name=None):
    """Keep the features matching a pandas query expression.

    Parameters:
    -----------
    source_layer : Layer
        Vector layer to filter
    condition : str
        Expression such as ``"subregion == 'Western Europe'"`` or ``"pop_est > 1e7"``

    Returns:
    --------
    result_layer : Layer
        Layer with the matching features
    """
    _require_objects(source_layer)

    objects = source_layer.objects.query(condition).copy()
    logger.debug("Filter %r kept %d of %d features", condition, len(objects), len(source_layer.objects))

    return _derived(source_layer, objects, layer_name, "filtered", {"operation": "filter", "condition": condition})


def group_summarize(source_layer, by, aggregations, dissolve=True, layer_name=None):
    """Group features and aggregate their attributes.

    Parameters:
    -----------
    source_layer : Layer
        Vector layer to group
    by : str or list of str
        Grouping column(s)
    aggregations : dict
        Mapping of column name to aggregation, e.g. ``{"pop_est": "mean"}``
    dissolve : bool
        Whether to merge the geometries of each group; if False the result is a plain attribute table

    Returns:
    --------
    result : Layer or pandas.DataFrame
        One row per group
    """
    _require_objects(source_layer)

    objects = source_layer.objects
    by_columns = [by] if isinstance(by, str) else list(by)
    missing = [col for col in by_columns + list(aggregations) if col not in objects.columns]
    if missing:
        raise ValueError(f"Columns {missing} not found in layer objects")

    if not dissolve:
        return objects.groupby(by_columns)[list(aggregations)].agg(aggregations).reset_index()

    grouped = objects[by_columns + list(aggregations) + [objects.geometry.name]].dissolve(
        by=by_columns, aggfunc=aggregations
    )
    grouped = grouped.reset_index()

    return _derived(
        source_layer,
        grouped,
        layer_name,
        "grouped",
        {"operation": "group", "by": by_columns, "aggregations": dict(aggregations)},
    )


def mutate(source_layer, column, expression, layer_name=None):
    """Derive a new attribute column.

    Parameters:
    -----------
    source_layer : Layer
        Vector layer to extend
    column : str
        Name of the new (or replaced) column
    expression : str or callable
        A pandas ``eval`` expression over existing columns (``"pop_est / 1e6"``),
        or a callable receiving the GeoDataFrame and returning the new values

    Returns:
    --------
    result_layer : Layer
        Layer with the additional column
    """
    _require_objects(source_layer)

    objects = source_layer.objects.copy()
    if callable(expression):
        objects[column] = expression(objects)
    else:
        objects[column] = objects.eval(expression)

    return _derived(source_layer, objects, layer_name, "mutated", {"operation": "mutate", "column": column})


def set_vector_crs(source_layer, crs, allow_override=False, layer_name=None):
    """Assign a CRS to a vector layer without transforming its coordinates."""
    _require_objects(source_layer)

    objects = source_layer.objects.set_crs(crs, allow_override=allow_override)
    return _derived(source_layer, objects, layer_name, "crs", {"operation": "set_crs", "crs": str(crs)})


def reproject_vector(source_layer, target_crs, layer_name=None):
    """Transform all geometries of a vector layer to another CRS.

    Parameters:
    -----------
    source_layer : Layer
        Vector layer with a CRS
    target_crs : str, int or pyproj.CRS
        Target coordinate reference system; an invalid definition raises a CRSError

    Returns:
    --------
    result_layer : Layer
        Reprojected layer
    """
    _require_objects(source_layer)
    if source_layer.objects.crs is None:
        raise ValueError(f"Layer '{source_layer.name}' has no CRS; assign one with set_vector_crs first")

    objects = source_layer.objects.to_crs(target_crs)
    logger.debug("Reprojected '%s' from %s to %s", source_layer.name, source_layer.objects.crs, objects.crs)

    return _derived(source_layer, objects, layer_name, "reprojected", {"operation": "reproject", "crs": str(target_crs)})


def to_legacy(source_layer, wkt_column="wkt"):
    """Convert a vector layer to a plain DataFrame with WKT geometries.

    The CRS, if any, is kept as a string in ``DataFrame.attrs["crs"]``.
    """
    _require_objects(source_layer)

    objects = source_layer.objects
    df = pd.DataFrame(objects.drop(columns=objects.geometry.name))
    df[wkt_column] = objects.geometry.to_wkt()
    df.attrs["crs"] = objects.crs.to_string() if objects.crs is not None else None

    return df


def from_legacy(df, crs=None, wkt_column="wkt", name=None):
    """Build a vector layer from a DataFrame holding WKT geometries.

    Parameters:
    -----------
    df : pandas.DataFrame
        Table with a WKT text column
    crs : str, optional
        CRS of the geometries; defaults to ``df.attrs["crs"]``
    wkt_column : str
        Name of the WKT column

    Returns:
    --------
    layer : Layer
        Vector layer
    """
    if wkt_column not in df.columns:
        raise ValueError(f"WKT column '{wkt_column}' not found; columns are {list(df.columns)}")

    if crs is None:
        crs = df.attrs.get("crs")

    geometry = gpd.GeoSeries(df[wkt_column].apply(wkt.loads), index=df.index, crs=crs)
    gdf = gpd.GeoDataFrame(df.drop(columns=wkt_column), geometry=geometry, crs=crs)

    return Layer.from_objects(gdf, name=name, metadata={"operation": "from_legacy"})
