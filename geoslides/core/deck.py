# -*- coding: utf-8 -*-
"""Runs a sequence of demonstration slides against an explicit layer registry.

Each slide names the layers it consumes and the layer it produces, so the data flow between slides is declared
up front instead of depending on whatever happened to run before. Slides run one after another in a single thread;
the first exception stops the deck.
"""

import importlib.util
import logging
import os
import re

import folium
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from .. import config
from .layer import Layer, LayerManager

logger = logging.getLogger(__name__)


def require_libraries(*modules):
    """Make sure every named module can be imported.

    Parameters:
    -----------
    *modules : str
        Importable module names, e.g. "rasterio" or "geopandas"

    Raises:
    -------
    ImportError
        If one of the modules is not installed
    """
    for module in modules:
        if importlib.util.find_spec(module) is None:
            raise ImportError(f"Required library '{module}' is not installed")


def _slugify(text):
    slug = re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")
    return slug or "slide"


class Slide:
    """One demonstration unit: check libraries, call one operation, render its result."""

    def __init__(self, title, run, requires=(), produces=None, libraries=()):
        """Initialize a slide.

        Parameters:
        -----------
        title : str
            Title shown when the slide is rendered
        run : callable
            Called with the layers named in ``requires``, in order
        requires : sequence of str
            Names of layers produced by earlier slides
        produces : str, optional
            Name under which a returned Layer is registered
        libraries : sequence of str
            Modules that must be importable before the slide runs
        """
        self.title = title
        self.run = run
        self.requires = tuple(requires)
        self.produces = produces
        self.libraries = tuple(libraries)

    def __repr__(self):
        return f"Slide({self.title!r}, requires={list(self.requires)}, produces={self.produces!r})"


class Deck:
    """An ordered list of slides sharing one LayerManager."""

    def __init__(self, manager=None, output_dir=None, title="Deck"):
        self.manager = manager if manager is not None else LayerManager()
        self.output_dir = output_dir if output_dir is not None else config.OUTPUT_DIR
        self.title = title
        self.slides = []

    def add(self, slide):
        """Append a slide and return it."""
        self.slides.append(slide)
        return slide

    def slide(self, title, requires=(), produces=None, libraries=()):
        """Decorator form of ``add``.

        Examples:
        ---------
        >>> @deck.slide("Read countries", produces="countries", libraries=["geopandas"])
        ... def read_countries():
        ...     return read_vector("data/countries.gpkg")
        """

        def decorator(func):
            self.add(Slide(title, func, requires=requires, produces=produces, libraries=libraries))
            return func

        return decorator

    def _render(self, index, slide, result):
        stem = f"{index:02d}_{_slugify(slide.title)}"

        if isinstance(result, Figure):
            os.makedirs(self.output_dir, exist_ok=True)
            path = os.path.join(self.output_dir, f"{stem}.png")
            result.savefig(path, bbox_inches="tight")
            plt.close(result)
            print(f"[{index:02d}] {slide.title}: figure saved to {path}")
            return path

        if isinstance(result, folium.Map):
            os.makedirs(self.output_dir, exist_ok=True)
            path = os.path.join(self.output_dir, f"{stem}.html")
            result.save(path)
            print(f"[{index:02d}] {slide.title}: map saved to {path}")
            return path

        text = str(result)
        print(f"[{index:02d}] {slide.title}")
        print(text)
        return text

    def run(self):
        """Run every slide in order.

        Returns:
        --------
        outputs : list
            One entry per slide: the path of a saved figure/map, or the printed text
        """
        outputs = []

        for index, slide in enumerate(self.slides, start=1):
            require_libraries(*slide.libraries)

            missing = [name for name in slide.requires if not self.manager.has_layer(name)]
            if missing:
                raise ValueError(f"Slide '{slide.title}' requires layers not produced yet: {', '.join(missing)}")

            inputs = [self.manager.get_layer(name) for name in slide.requires]
            logger.info("Running slide %d/%d: %s", index, len(self.slides), slide.title)
            result = slide.run(*inputs)

            if slide.produces:
                if not isinstance(result, Layer):
                    raise TypeError(
                        f"Slide '{slide.title}' declares it produces '{slide.produces}' but returned {type(result).__name__}"
                    )
                if any(result is layer for layer in inputs):
                    result = result.copy()
                result.name = slide.produces
                self.manager.add_layer(result)

            outputs.append(self._render(index, slide, result))

        return outputs
