# -*- coding: utf-8 -*-
"""Static plots, level plots and interactive web maps."""
