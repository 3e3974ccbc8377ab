# -*- coding: utf-8 -*-
"""The io package contains modules for reading and writing raster, vector and point data.

It also covers the KMZ export used to hand rasters over to external GIS tools.
"""
