# -*- coding: utf-8 -*-
"""Downloads WorldClim 2.1 climate grids and opens them as raster stacks.

WorldClim publishes one zip archive per variable and spatial resolution; each archive holds one GeoTIFF per month
(or per bioclimatic variable), all on the same global grid.
"""

import glob
import logging
import os
import zipfile

from .. import config
from ..io.raster import read_raster_stack
from . import http_utils

logger = logging.getLogger(__name__)


def climate_archive_name(var, res):
    """Return the archive stem for a variable and resolution, e.g. ``wc2.1_10m_tavg``."""
    if var not in config.WORLDCLIM_VARIABLES:
        raise ValueError(f"Unknown climate variable '{var}', expected one of {config.WORLDCLIM_VARIABLES}")
    if res not in config.WORLDCLIM_RESOLUTIONS:
        raise ValueError(f"Unknown resolution {res}, expected one of {sorted(config.WORLDCLIM_RESOLUTIONS)}")

    return f"wc2.1_{config.WORLDCLIM_RESOLUTIONS[res]}_{var}"


def download_climate(var, res, path, base_url=config.WORLDCLIM_BASE_URL, overwrite=False):
    """Download and unpack a WorldClim archive.

    Parameters:
    -----------
    var : str
        Climate variable, e.g. "tavg", "prec" or "bio"
    res : float
        Resolution in arc-minutes: 10, 5, 2.5 or 0.5 (30 seconds)
    path : str
        Directory to store the archive and the extracted GeoTIFFs
    base_url : str
        Root of the WorldClim download tree
    overwrite : bool
        Download again even if the archive is already present

    Returns:
    --------
    tif_paths : list of str
        Sorted paths of the extracted GeoTIFFs
    """
    stem = climate_archive_name(var, res)
    archive_path = os.path.join(path, f"{stem}.zip")

    if overwrite or not os.path.exists(archive_path):
        http_utils.download(f"{base_url}/{stem}.zip", archive_path)
    else:
        logger.info("Using existing archive %s", archive_path)

    extract_dir = os.path.join(path, stem)
    with zipfile.ZipFile(archive_path) as archive:
        members = [m for m in archive.namelist() if m.lower().endswith(".tif")]
        archive.extractall(extract_dir, members=members)

    tif_paths = sorted(glob.glob(os.path.join(extract_dir, "**", "*.tif"), recursive=True))
    if not tif_paths:
        raise FileNotFoundError(f"No GeoTIFF files found in {archive_path}")

    return tif_paths


def climate_stack(var, res, path, **kwargs):
    """Download a WorldClim variable and return it as one multi-band raster layer."""
    tif_paths = download_climate(var, res, path, **kwargs)
    return read_raster_stack(tif_paths, name=climate_archive_name(var, res))
