# -*- coding: utf-8 -*-
"""Default parameters shared by the demonstration steps.

Every function that reads one of these values also accepts it as a keyword argument,
so a slide can override a default inline without touching this module.
"""

OUTPUT_DIR = "output"

# WorldClim 2.1 bulk archives, e.g. {base}/wc2.1_10m_tavg.zip
WORLDCLIM_BASE_URL = "https://geodata.ucdavis.edu/climate/worldclim/2_1/base"
WORLDCLIM_VARIABLES = ("tmin", "tmax", "tavg", "prec", "srad", "wind", "vapr", "bio", "elev")
WORLDCLIM_RESOLUTIONS = {
    10: "10m",
    5: "5m",
    2.5: "2.5m",
    0.5: "30s",
}

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
USER_AGENT = "geoslides/0.1.0 (teaching deck)"

# seconds; applies to a single request, nothing is retried
HTTP_TIMEOUT = 30
DOWNLOAD_CHUNK_SIZE = 1024 * 1024

RASTER_CMAP = "viridis"
VECTOR_CMAP = "YlOrRd"
CATEGORICAL_CMAP = "tab10"
WEB_CRS = "EPSG:4326"
