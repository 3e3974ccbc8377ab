# -*- coding: utf-8 -*-
"""Summary statistics printed by the demonstration steps."""
