# -*- coding: utf-8 -*-
"""The web package wraps the remote services used by the deck: geocoding and climate data downloads."""
