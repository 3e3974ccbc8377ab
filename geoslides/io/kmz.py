# -*- coding: utf-8 -*-
"""Exports raster layers as KMZ archives for exchange with external GIS tools such as Google Earth.

A KMZ is a zip file holding ``doc.kml`` and the overlay image it references. The raster is warped to geographic
coordinates first, because KML ground overlays are always given in longitude/latitude.
"""

import io
import os
import zipfile
from xml.sax.saxutils import escape

import matplotlib.pyplot as plt
import numpy as np

from .. import config
from ..filters.raster import reproject_raster

KML_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <name>{name}</name>
    <GroundOverlay>
      <name>{band}</name>
      <Icon>
        <href>{image}</href>
      </Icon>
      <LatLonBox>
        <north>{north}</north>
        <south>{south}</south>
        <east>{east}</east>
        <west>{west}</west>
      </LatLonBox>
    </GroundOverlay>
  </Document>
</kml>
"""


def write_kmz(layer, output_path, band=0, cmap=config.RASTER_CMAP):
    """Write one band of a raster layer to a KMZ ground overlay.

    Parameters:
    -----------
    layer : Layer
        Raster layer to export
    output_path : str
        Path of the .kmz file
    band : int
        Index of the band to export
    cmap : str
        Matplotlib colormap used to render the band

    Returns:
    --------
    output_path : str
        Path of the written archive
    """
    if layer.raster is None:
        raise ValueError("Layer has no raster data")
    if not 0 <= band < layer.count:
        raise ValueError(f"Band index {band} out of range for a layer with {layer.count} band(s)")
    if not output_path.lower().endswith(".kmz"):
        raise ValueError(f"KMZ output path must end with .kmz: {output_path}")

    geographic = layer
    if layer.crs is None or not layer.crs.is_geographic:
        geographic = reproject_raster(layer, config.WEB_CRS)

    values = geographic.masked(band)
    image = io.BytesIO()
    if np.all(np.isnan(values)):
        plt.imsave(image, np.zeros_like(values), cmap=cmap, format="png")
    else:
        plt.imsave(image, values, cmap=cmap, vmin=np.nanmin(values), vmax=np.nanmax(values), format="png")

    west, south, east, north = geographic.bounds
    kml = KML_TEMPLATE.format(
        name=escape(layer.name),
        band=escape(layer.band_names[band]),
        image="overlay.png",
        north=north,
        south=south,
        east=east,
        west=west,
    )

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with zipfile.ZipFile(output_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("doc.kml", kml)
        archive.writestr("overlay.png", image.getvalue())

    return output_path
