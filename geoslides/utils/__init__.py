# -*- coding: utf-8 -*-
"""Utility helpers, mostly generators of offline sample data."""
