# -*- coding: utf-8 -*-
"""Functions to create static maps, level plots and interactive web maps of layers."""

import os

import folium
import matplotlib.pyplot as plt
import numpy as np
from folium.raster_layers import ImageOverlay
from matplotlib import colormaps
from matplotlib.colors import Normalize, to_hex
from pandas.api.types import is_numeric_dtype

from .. import config
from ..filters.raster import reproject_raster


def _raster_extent(layer):
    minx, miny, maxx, maxy = layer.bounds
    return minx, maxx, miny, maxy


def plot_layer(
    layer,
    attribute=None,
    band=0,
    title=None,
    figsize=(12, 10),
    cmap=None,
    overlay=None,
):
    """Plot a vector or raster layer.

    Parameters:
    -----------
    layer : Layer
        Layer to plot
    attribute : str, optional
        Attribute used to color vector features
    band : int
        Band drawn for raster layers
    title : str, optional
        Title of the figure
    figsize : tuple
        Figure size
    cmap : str, optional
        Colormap; defaults depend on the layer type
    overlay : Layer, optional
        Vector layer drawn on top, e.g. sample points over a climate grid

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    if title:
        ax.set_title(title)
    elif layer.is_raster:
        ax.set_title(f"{layer.name}: {layer.band_names[band]}")
    elif attribute:
        ax.set_title(f"{layer.name}: {attribute}")
    else:
        ax.set_title(layer.name)

    if layer.is_raster:
        image = ax.imshow(
            layer.masked(band),
            extent=_raster_extent(layer),
            cmap=cmap or config.RASTER_CMAP,
            interpolation="nearest",
        )
        fig.colorbar(image, ax=ax, shrink=0.7)
    elif attribute:
        if attribute not in layer.objects.columns:
            plt.close(fig)
            raise ValueError(f"Attribute '{attribute}' not found in layer objects")
        layer.objects.plot(
            column=attribute,
            cmap=cmap or config.VECTOR_CMAP,
            ax=ax,
            legend=True,
            edgecolor="black",
            linewidth=0.3,
        )
    else:
        layer.objects.plot(ax=ax, edgecolor="black", linewidth=0.3)

    if overlay is not None:
        objects = overlay.objects
        if layer.crs is not None and objects.crs is not None:
            objects = objects.to_crs(layer.crs)
        if (objects.geom_type == "Point").all():
            objects.plot(ax=ax, color="red", markersize=20, edgecolor="black")
        else:
            objects.plot(ax=ax, facecolor="none", edgecolor="red")

    ax.set_xlabel("X Coordinate")
    ax.set_ylabel("Y Coordinate")
    ax.grid(alpha=0.3)
    return fig


def plot_levels(layer, bands=None, ncols=4, cmap=None, panel_size=3.5):
    """Draw a level plot: one panel per band on a common color scale.

    Parameters:
    -----------
    layer : Layer
        Raster layer, usually a multi-band stack such as monthly temperatures
    bands : list of int, optional
        Band indices to draw; all bands by default
    ncols : int
        Maximum number of panels per row
    cmap : str, optional
        Colormap
    panel_size : float
        Width and height of each panel in inches

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    if not layer.is_raster:
        raise ValueError("Level plots need a raster layer")

    bands = list(range(layer.count)) if bands is None else list(bands)
    if not bands:
        raise ValueError("No bands to plot")

    ncols = min(ncols, len(bands))
    nrows = int(np.ceil(len(bands) / ncols))

    data = layer.masked()[bands]
    vmin, vmax = np.nanmin(data), np.nanmax(data)

    fig, axes = plt.subplots(nrows, ncols, figsize=(panel_size * ncols, panel_size * nrows), squeeze=False)
    extent = _raster_extent(layer)

    image = None
    for ax, band, values in zip(axes.ravel(), bands, data):
        image = ax.imshow(values, extent=extent, cmap=cmap or config.RASTER_CMAP, vmin=vmin, vmax=vmax)
        ax.set_title(layer.band_names[band], fontsize=9)
        ax.set_xticks([])
        ax.set_yticks([])

    for ax in axes.ravel()[len(bands) :]:
        ax.set_visible(False)

    fig.colorbar(image, ax=axes.ravel().tolist(), shrink=0.8)
    fig.suptitle(layer.name)
    return fig


def _raster_overlay(layer, band, cmap, opacity):
    # the image is placed on a lon/lat box, so projected grids are warped first
    geographic = layer
    if not layer.crs.is_geographic:
        geographic = reproject_raster(layer, config.WEB_CRS)

    values = geographic.masked(band)
    if np.all(np.isnan(values)):
        raise ValueError(f"Band {band} of layer '{layer.name}' has no valid cells")

    norm = Normalize(vmin=np.nanmin(values), vmax=np.nanmax(values))
    rgba = colormaps[cmap or config.RASTER_CMAP](norm(values))
    rgba[np.isnan(values)] = (0, 0, 0, 0)

    west, south, east, north = geographic.bounds

    overlay = ImageOverlay(
        name=layer.band_names[band],
        image=rgba,
        bounds=[[south, west], [north, east]],
        opacity=opacity,
        mercator_project=True,
    )
    return overlay, [[south, west], [north, east]]


def _vector_overlay(layer, attribute, cmap):
    objects = layer.objects.to_crs(config.WEB_CRS)
    fields = [col for col in objects.columns if col != objects.geometry.name][:5]

    style_function = None
    if attribute:
        if attribute not in objects.columns:
            raise ValueError(f"Attribute '{attribute}' not found in layer objects")
        values = objects[attribute]
        if is_numeric_dtype(values):
            colormap = colormaps[cmap or config.VECTOR_CMAP]
            norm = Normalize(vmin=values.min(), vmax=values.max())

            def color_of(value):
                return to_hex(colormap(norm(value)))

        else:
            colormap = colormaps[cmap or config.CATEGORICAL_CMAP]
            categories = sorted(values.dropna().unique(), key=str)
            if colormap.N < 256:
                # qualitative colormap: one color per category, cycling when they run out
                palette = {category: to_hex(colormap(i % colormap.N)) for i, category in enumerate(categories)}
            else:
                steps = max(len(categories) - 1, 1)
                palette = {category: to_hex(colormap(i / steps)) for i, category in enumerate(categories)}

            def color_of(value):
                return palette.get(value, "#cccccc")

        def style_function(feature):
            value = feature["properties"][attribute]
            fill = "#cccccc" if value is None else color_of(value)
            return {"fillColor": fill, "color": "black", "weight": 0.5, "fillOpacity": 0.7}

    overlay = folium.GeoJson(
        objects.to_json(),
        name=layer.name,
        style_function=style_function,
        tooltip=folium.GeoJsonTooltip(fields=fields) if fields else None,
    )
    minx, miny, maxx, maxy = objects.total_bounds
    return overlay, [[miny, minx], [maxy, maxx]]


def map_interactive(layer, attribute=None, band=0, cmap=None, opacity=0.7, tiles="OpenStreetMap"):
    """Build an interactive web map of a layer on top of web map tiles.

    Parameters:
    -----------
    layer : Layer
        Vector or raster layer; must carry a CRS
    attribute : str, optional
        Attribute used to color vector features
    band : int
        Band shown for raster layers
    cmap : str, optional
        Colormap
    opacity : float
        Opacity of raster overlays
    tiles : str
        Folium tile set name

    Returns:
    --------
    fmap : folium.Map
        Map widget, displayed inline in notebooks or saved with ``save_map``
    """
    if layer.crs is None:
        raise ValueError(f"Layer '{layer.name}' has no CRS and cannot be placed on a web map")

    if layer.is_raster:
        overlay, bounds = _raster_overlay(layer, band, cmap, opacity)
    else:
        overlay, bounds = _vector_overlay(layer, attribute, cmap)

    (south, west), (north, east) = bounds
    fmap = folium.Map(location=[(south + north) / 2, (west + east) / 2], tiles=tiles)
    overlay.add_to(fmap)
    fmap.fit_bounds(bounds)
    folium.LayerControl().add_to(fmap)

    return fmap


def save_map(fmap, output_path):
    """Save an interactive map as a standalone HTML page."""
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fmap.save(output_path)
    return output_path
