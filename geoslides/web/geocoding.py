# -*- coding: utf-8 -*-
"""Turns free-text addresses into coordinates through a Nominatim-compatible search API.

There is no retry and no cache: each call sends one request. Network failures and provider errors (quota,
authentication) propagate as ``requests`` exceptions; an address the provider cannot find raises LookupError.
"""

import geopandas as gpd
from shapely.geometry import Point

from .. import config
from ..core.layer import Layer
from . import http_utils


def geocode(address, provider_url=config.NOMINATIM_URL, timeout=config.HTTP_TIMEOUT, user_agent=config.USER_AGENT):
    """Geocode an address.

    Parameters:
    -----------
    address : str
        Free-text address, e.g. "Ulica Kosarska 1, Zagreb"
    provider_url : str
        Search endpoint of a Nominatim-compatible service
    timeout : float
        Seconds to wait for the provider

    Returns:
    --------
    lon, lat : tuple of float
        Coordinates of the best match in EPSG:4326
    """
    if not address or not address.strip():
        raise ValueError("Address must not be empty")

    resp = http_utils.get(
        provider_url,
        params={"q": address, "format": "json", "limit": 1},
        timeout=timeout,
        user_agent=user_agent,
    )
    results = resp.json()

    if not results:
        raise LookupError(f"Address not found: {address!r}")

    best = results[0]
    return float(best["lon"]), float(best["lat"])


def geocode_to_layer(address, name=None, **kwargs):
    """Geocode an address and wrap the result as a one-point vector layer."""
    lon, lat = geocode(address, **kwargs)

    gdf = gpd.GeoDataFrame({"address": [address]}, geometry=[Point(lon, lat)], crs=config.WEB_CRS)
    return Layer.from_objects(gdf, name=name or "geocoded", metadata={"operation": "geocode", "address": address})
