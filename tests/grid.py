# -*- coding: utf-8 -*-
"""Geometry of the synthetic UTM grid used by the raster fixtures."""

ORIGIN_X = 500000.0
ORIGIN_Y = 5000060.0
CELL = 10.0
