# -*- coding: utf-8 -*-
"""Defines the Layer class and the LayerManager that carries objects between slides.

A layer is a named container for exactly one in-memory geospatial entity: either a vector feature collection
(a GeoDataFrame whose rows share one coordinate reference system) or a raster grid (a band stack sharing one
extent, resolution and projection). Layers derived from another layer keep a reference to it as their parent.
The LayerManager is the explicit pipeline state of a deck: slides read their inputs from it by name instead of
relying on whatever a previous step left lying around.
"""

import copy
import logging
import uuid

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class Layer:
    """A Layer holds one vector feature collection or one raster grid, plus metadata.

    Vector layers store their features in ``objects``. Raster layers store a ``(bands, height, width)`` array
    in ``raster`` together with its affine ``transform``, ``crs``, ``nodata`` value and ``band_names``.
    """

    def __init__(self, name=None, parent=None, type="vector"):
        """Initialize a Layer.

        Parameters:
        -----------
        name : str, optional
            Name of the layer. If None, a unique name will be generated.
        parent : Layer, optional
            Parent layer that this layer is derived from.
        type : str
            Type of layer: "vector" or "raster"
        """
        if type not in ("vector", "raster"):
            raise ValueError(f"Unknown layer type '{type}', expected 'vector' or 'raster'")

        self.id = str(uuid.uuid4())
        self.name = name if name else f"Layer_{self.id[:8]}"
        self.parent = parent
        self.type = type
        self.created_at = pd.Timestamp.now()

        self.raster = None
        self.objects = None
        self.metadata = {}
        self.transform = None
        self.crs = None
        self.nodata = None
        self.band_names = []

        self.attached_functions = {}

    @classmethod
    def from_objects(cls, objects, name=None, parent=None, metadata=None):
        """Wrap a GeoDataFrame into a vector layer."""
        layer = cls(name=name, parent=parent, type="vector")
        layer.objects = objects
        layer.crs = objects.crs
        layer.metadata = dict(metadata or {})
        return layer

    @classmethod
    def from_array(cls, data, transform, crs, nodata=None, band_names=None, name=None, parent=None, metadata=None):
        """Wrap a raster array into a raster layer.

        A 2-D array is treated as a single band.
        """
        data = np.asarray(data)
        if data.ndim == 2:
            data = data.reshape(1, *data.shape)
        if data.ndim != 3:
            raise ValueError(f"Raster data must be 2-D or 3-D, got shape {data.shape}")

        if band_names is None:
            band_names = [f"band_{i + 1}" for i in range(data.shape[0])]
        if len(band_names) != data.shape[0]:
            raise ValueError(f"Got {len(band_names)} band names for {data.shape[0]} bands")

        layer = cls(name=name, parent=parent, type="raster")
        layer.raster = data
        layer.transform = transform
        layer.crs = crs
        layer.nodata = nodata
        layer.band_names = list(band_names)
        layer.metadata = dict(metadata or {})
        return layer

    @property
    def is_raster(self):
        return self.type == "raster"

    @property
    def count(self):
        """Number of bands for rasters, number of features for vectors."""
        if self.is_raster:
            return 0 if self.raster is None else self.raster.shape[0]
        return 0 if self.objects is None else len(self.objects)

    @property
    def shape(self):
        """(height, width) of a raster layer."""
        if self.raster is None:
            return None
        return self.raster.shape[-2], self.raster.shape[-1]

    @property
    def resolution(self):
        """(xres, yres) cell size of a raster layer, both positive."""
        if self.transform is None:
            return None
        return abs(self.transform.a), abs(self.transform.e)

    @property
    def bounds(self):
        """(minx, miny, maxx, maxy) extent of the layer."""
        if self.is_raster:
            if self.raster is None or self.transform is None:
                return None
            height, width = self.shape
            x0, y0 = self.transform * (0, 0)
            x1, y1 = self.transform * (width, height)
            return min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)
        if self.objects is None:
            return None
        return tuple(float(v) for v in self.objects.total_bounds)

    def masked(self, band=None):
        """Return the raster as a float array with nodata cells set to NaN."""
        if self.raster is None:
            raise ValueError(f"Layer '{self.name}' has no raster data")
        data = self.raster if band is None else self.raster[band]
        data = data.astype(float)
        if self.nodata is not None and not np.isnan(self.nodata):
            data[data == self.nodata] = np.nan
        return data

    def attach_function(self, function, name=None, **kwargs):
        """Attach a function to this layer and execute it.

        Parameters:
        -----------
        function : callable
            Function to attach and execute, called as ``function(layer, **kwargs)``
        name : str, optional
            Name for this function. If None, uses function.__name__
        **kwargs : dict
            Arguments to pass to the function

        Returns:
        --------
        self : Layer
            Returns self for chaining
        """
        func_name = name if name else function.__name__

        result = function(self, **kwargs)

        self.attached_functions[func_name] = {
            "function": function,
            "args": kwargs,
            "result": result,
        }

        return self

    def get_function_result(self, function_name):
        """Get the result of an attached function."""
        if function_name not in self.attached_functions:
            raise ValueError(f"Function '{function_name}' not attached to this layer")

        return self.attached_functions[function_name]["result"]

    def copy(self):
        """Create an independent copy of this layer.

        Returns:
        --------
        layer_copy : Layer
            Copy of this layer
        """
        new_layer = Layer(name=f"{self.name}_copy", parent=self.parent, type=self.type)

        if self.raster is not None:
            new_layer.raster = self.raster.copy()

        if self.objects is not None:
            new_layer.objects = self.objects.copy()

        new_layer.metadata = copy.deepcopy(self.metadata)
        new_layer.transform = self.transform
        new_layer.crs = self.crs
        new_layer.nodata = self.nodata
        new_layer.band_names = list(self.band_names)

        return new_layer

    def __str__(self):
        """String representation of the layer."""
        parent_name = self.parent.name if self.parent else "None"

        if self.is_raster:
            height, width = self.shape if self.raster is not None else (0, 0)
            return (
                f"Layer '{self.name}' (type: raster, parent: {parent_name}, "
                f"bands: {self.count}, size: {height}x{width}, crs: {self.crs})"
            )

        return f"Layer '{self.name}' (type: vector, parent: {parent_name}, features: {self.count}, crs: {self.crs})"


class LayerManager:
    """Manages the named layers a deck passes from one slide to the next."""

    def __init__(self):
        """Initialize the layer manager."""
        self.layers = {}
        self.active_layer = None

    def add_layer(self, layer, set_active=True):
        """Add a layer to the manager.

        A layer whose name is already registered replaces the older one.

        Parameters:
        -----------
        layer : Layer
            Layer to add
        set_active : bool
            Whether to set this layer as the active layer

        Returns:
        --------
        layer : Layer
            The added layer
        """
        for existing in list(self.layers.values()):
            if existing.name == layer.name and existing.id != layer.id:
                logger.debug("Replacing layer '%s'", layer.name)
                del self.layers[existing.id]

        self.layers[layer.id] = layer

        if set_active:
            self.active_layer = layer

        return layer

    def has_layer(self, layer_id_or_name):
        """Check whether a layer id or name is registered."""
        if layer_id_or_name in self.layers:
            return True
        return any(layer.name == layer_id_or_name for layer in self.layers.values())

    def get_layer(self, layer_id_or_name):
        """Get a layer by ID or name.

        Parameters:
        -----------
        layer_id_or_name : str
            Layer ID or name

        Returns:
        --------
        layer : Layer
            The requested layer
        """
        if layer_id_or_name in self.layers:
            return self.layers[layer_id_or_name]

        for layer in self.layers.values():
            if layer.name == layer_id_or_name:
                return layer

        raise ValueError(f"Layer '{layer_id_or_name}' not found")

    def get_layer_names(self):
        """Get a list of all layer names, in insertion order."""
        return [layer.name for layer in self.layers.values()]

    def remove_layer(self, layer_id_or_name):
        """Remove a layer from the manager."""
        layer = self.get_layer(layer_id_or_name)

        if layer.id in self.layers:
            del self.layers[layer.id]

        if self.active_layer and self.active_layer.id == layer.id:
            if self.layers:
                self.active_layer = list(self.layers.values())[-1]
            else:
                self.active_layer = None
