# -*- coding: utf-8 -*-
"""The filters package provides the transformations applied between loading and plotting.

Vector filters cover the data-frame verbs (select, filter, group, mutate) and reprojection; raster filters cover
projection, cropping, aggregation and value extraction.
"""
