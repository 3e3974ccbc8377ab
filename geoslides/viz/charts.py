# -*- coding: utf-8 -*-
"""Visualization functions for plotting value distributions of layers."""

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns


def plot_histogram(layer, attribute=None, band=0, bins=20, figsize=(10, 6), by_class=None):
    """Plot a histogram of attribute values or of a raster band's cell values.

    Parameters:
    -----------
    layer : Layer
        Layer containing data
    attribute : str, optional
        Attribute to plot (vector layers)
    band : int
        Band to plot (raster layers); nodata cells are left out
    bins : int
        Number of bins
    figsize : tuple
        Figure size
    by_class : str, optional
        Column to group by (vector layers only)

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    if layer.is_raster:
        values = layer.masked(band).ravel()
        values = values[~np.isnan(values)]
        label = layer.band_names[band]
        sns.histplot(values, bins=bins, ax=ax)
    else:
        if layer.objects is None or attribute not in layer.objects.columns:
            plt.close(fig)
            raise ValueError(f"Attribute '{attribute}' not found in layer objects")

        label = attribute
        if by_class and by_class in layer.objects.columns:
            data = layer.objects[[attribute, by_class]].copy()

            for class_value, group in data.groupby(by_class):
                sns.histplot(group[attribute], bins=bins, alpha=0.6, label=str(class_value), ax=ax)

            ax.legend(title=by_class)
        else:
            sns.histplot(layer.objects[attribute], bins=bins, ax=ax)

    ax.set_title(f"Histogram of {label}")
    ax.set_xlabel(label)
    ax.set_ylabel("Count")

    return fig
