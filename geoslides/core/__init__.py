# -*- coding: utf-8 -*-
"""The core package holds the data containers and the slide runner of geoslides.

Layers wrap one vector or raster entity each, the LayerManager carries them between steps, and the Deck runs the
demonstration steps in order.
"""
