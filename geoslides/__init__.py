# -*- coding: utf-8 -*-
# geoslides/__init__.py

"""
geoslides: a step-by-step tour of the Python geospatial stack
=============================================================

geoslides wraps the calls a GIS teaching deck walks through, one short step at a time,
and runs them as a sequence of slides sharing explicit, named state.

Key features:
- Vector I/O, table operations and reprojection (geopandas)
- Raster I/O, stacks, cropping, aggregation and value extraction (rasterio)
- Static maps, level plots and interactive web maps (matplotlib, folium)
- Geocoding and climate data downloads
- KMZ export for external GIS tools
"""

__version__ = "0.1.0"

from .core.deck import Deck, Slide, require_libraries
from .core.layer import Layer, LayerManager

from .filters.raster import aggregate, crop, extract_values, reproject_raster, set_raster_crs
from .filters.vector import (
    filter_rows,
    from_legacy,
    group_summarize,
    mutate,
    reproject_vector,
    select_columns,
    set_vector_crs,
    to_legacy,
)

from .io.kmz import write_kmz
from .io.points import read_points
from .io.raster import layer_to_raster, read_raster, read_raster_layer, read_raster_stack, write_raster
from .io.vector import layer_to_vector, read_vector, write_vector

from .stats.basic import attach_basic_stats, describe_layer

from .utils.helpers import create_sample_countries, create_sample_data

from .viz.charts import plot_histogram
from .viz.maps import map_interactive, plot_layer, plot_levels, save_map

from .web.climate import climate_stack, download_climate
from .web.geocoding import geocode, geocode_to_layer
