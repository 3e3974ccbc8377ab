# -*- coding: utf-8 -*-
"""HTTP helpers shared by the geocoding and download steps.

Requests are sent once; timeouts, connection errors and HTTP error statuses propagate to the caller.
"""

import logging
import os

import requests

from .. import config

logger = logging.getLogger(__name__)


def get(url, params=None, timeout=config.HTTP_TIMEOUT, user_agent=config.USER_AGENT, **kwargs):
    """GET a URL and raise on HTTP error statuses."""
    headers = {"User-Agent": user_agent}
    headers.update(kwargs.pop("headers", {}))

    logger.debug("GET %s params=%s", url, params)
    resp = requests.get(url, params=params, timeout=timeout, headers=headers, **kwargs)
    resp.raise_for_status()
    return resp


def download(url, destination, timeout=config.HTTP_TIMEOUT, chunk_size=config.DOWNLOAD_CHUNK_SIZE):
    """Stream a remote file to disk.

    The file is written under a temporary name and moved into place once complete, so an interrupted download
    never leaves a truncated file at ``destination``.
    """
    directory = os.path.dirname(destination)
    if directory:
        os.makedirs(directory, exist_ok=True)

    partial = f"{destination}.part"
    resp = get(url, timeout=timeout, stream=True)
    try:
        with open(partial, "wb") as f:
            for chunk in resp.iter_content(chunk_size=chunk_size):
                if chunk:
                    f.write(chunk)
    except BaseException:
        if os.path.exists(partial):
            os.remove(partial)
        raise
    finally:
        resp.close()

    os.replace(partial, destination)
    logger.info("Downloaded %s to %s", url, destination)
    return destination
