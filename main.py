# -*- coding: utf-8 -*-
"""Demonstration deck.

Walks through vector and raster workflows one slide at a time. Every slide names the layers it needs and the layer
it produces, so the deck can be read (and re-run) top to bottom without hidden state.
"""

import glob
import logging
import os

import geopandas as gpd
from shapely.geometry import Point

from geoslides import (
    Deck,
    Layer,
    aggregate,
    climate_stack,
    create_sample_countries,
    create_sample_data,
    crop,
    describe_layer,
    extract_values,
    filter_rows,
    from_legacy,
    geocode_to_layer,
    group_summarize,
    layer_to_vector,
    map_interactive,
    plot_histogram,
    plot_layer,
    plot_levels,
    read_points,
    read_raster_stack,
    read_vector,
    reproject_vector,
    to_legacy,
    write_kmz,
    write_raster,
)

CITIES = {
    "Paris": (2.35, 48.86),
    "Berlin": (13.40, 52.52),
    "Vienna": (16.37, 48.21),
    "Madrid": (-3.70, 40.42),
    "Oslo": (10.75, 59.91),
}

WESTERN_EUROPE = (-5.0, 42.0, 17.5, 55.5)


def build_deck(data_dir=None, output_dir="output", online=False):
    """Assemble the slides of the deck.

    Parameters:
    -----------
    data_dir : str, optional
        Directory with ``countries.gpkg``, ``points.csv`` and a ``wc2.1_10m_tavg`` folder of GeoTIFFs;
        sample data is generated for anything missing
    output_dir : str
        Where figures, maps and exports are written
    online : bool
        Whether to include the slides that call remote services

    Returns:
    --------
    deck : Deck
    """
    deck = Deck(output_dir=output_dir, title="Python as a GIS")

    def data_path(*parts):
        return os.path.join(data_dir, *parts) if data_dir else None

    @deck.slide("Read a vector file", produces="countries", libraries=["geopandas"])
    def read_countries():
        path = data_path("countries.gpkg")
        if path and os.path.exists(path):
            return read_vector(path)
        return create_sample_countries()

    @deck.slide("Inspect the feature collection", requires=["countries"])
    def inspect_countries(countries):
        return describe_layer(countries)

    @deck.slide("Filter rows", requires=["countries"], produces="western_europe")
    def western_europe(countries):
        return filter_rows(countries, "subregion == 'Western Europe'")

    @deck.slide("Group and summarize", requires=["countries"], libraries=["pandas"])
    def population_by_subregion(countries):
        return group_summarize(countries, "subregion", {"pop_est": "mean"}, dissolve=False)

    @deck.slide("Plot an attribute", requires=["countries"], libraries=["matplotlib"])
    def plot_population(countries):
        return plot_layer(countries, attribute="pop_est", title="Population estimate")

    @deck.slide("Reproject to LAEA Europe", requires=["countries"], produces="countries_laea", libraries=["pyproj"])
    def to_laea(countries):
        return reproject_vector(countries, "EPSG:3035")

    @deck.slide("Convert to a legacy table and back", requires=["countries_laea"], produces="countries_roundtrip")
    def legacy_roundtrip(countries_laea):
        return from_legacy(to_legacy(countries_laea))

    @deck.slide("Write a GeoPackage", requires=["western_europe"])
    def export_vector(western):
        path = os.path.join(output_dir, "western_europe.gpkg")
        layer_to_vector(western, path)
        return path

    @deck.slide("Interactive map", requires=["countries"], libraries=["folium"])
    def interactive_countries(countries):
        return map_interactive(countries, attribute="pop_est")

    @deck.slide("Read a raster stack", produces="tavg", libraries=["rasterio"])
    def read_tavg():
        pattern = data_path("wc2.1_10m_tavg", "*.tif")
        if pattern and glob.glob(pattern):
            return read_raster_stack(pattern, name="tavg")
        return create_sample_data()

    @deck.slide("Level plot", requires=["tavg"])
    def level_plot(tavg):
        return plot_levels(tavg)

    @deck.slide("Crop to Western Europe", requires=["tavg"], produces="tavg_west")
    def crop_tavg(tavg):
        return crop(tavg, WESTERN_EUROPE)

    @deck.slide("Aggregate by a factor of 2", requires=["tavg_west"], produces="tavg_coarse")
    def coarsen(tavg_west):
        return aggregate(tavg_west, 2, fun="mean", remainder="expand")

    @deck.slide("Histogram of July temperatures", requires=["tavg_coarse"], libraries=["seaborn"])
    def july_histogram(tavg_coarse):
        return plot_histogram(tavg_coarse, band=6)

    @deck.slide("Read point locations", produces="cities")
    def read_cities():
        path = data_path("points.csv")
        if path and os.path.exists(path):
            return read_points(path)
        gdf = gpd.GeoDataFrame(
            {"city": list(CITIES)},
            geometry=[Point(*xy) for xy in CITIES.values()],
            crs="EPSG:4326",
        )
        return Layer.from_objects(gdf, name="cities")

    @deck.slide("Extract values at points", requires=["tavg", "cities"])
    def values_at_cities(tavg, cities):
        values = extract_values(tavg, cities)
        values.insert(0, "city", cities.objects.get("city", cities.objects.index))
        return values

    @deck.slide("Plot raster with points", requires=["tavg_west", "cities"])
    def plot_july(tavg_west, cities):
        return plot_layer(tavg_west, band=6, overlay=cities, cmap="RdYlBu_r")

    @deck.slide("Export GeoTIFF and KMZ", requires=["tavg_coarse"])
    def export_raster(tavg_coarse):
        tif_path = os.path.join(output_dir, "tavg_coarse.tif")
        write_raster(
            tif_path,
            tavg_coarse.raster,
            tavg_coarse.transform,
            tavg_coarse.crs,
            tavg_coarse.nodata,
            band_names=tavg_coarse.band_names,
            compress="deflate",
        )
        kmz_path = write_kmz(tavg_coarse, os.path.join(output_dir, "tavg_coarse_july.kmz"), band=6)
        return f"{tif_path}\n{kmz_path}"

    if online:

        @deck.slide("Geocode an address", produces="geocoded", libraries=["requests"])
        def geocode_address():
            return geocode_to_layer("Place de la Concorde, Paris")

        @deck.slide("Download WorldClim temperatures", produces="worldclim", libraries=["requests"])
        def download_tavg():
            return climate_stack("tavg", 10, os.path.join(output_dir, "worldclim"))

        @deck.slide("Temperature at the geocoded address", requires=["worldclim", "geocoded"])
        def values_at_address(worldclim, geocoded):
            return extract_values(worldclim, geocoded)

    return deck


def run_example(data_dir=None, output_dir="output", online=False):
    """Run Example."""
    os.makedirs(output_dir, exist_ok=True)

    deck = build_deck(data_dir=data_dir, output_dir=output_dir, online=online)
    deck.run()

    print(f"\nResults saved to {output_dir}")
    print("Available layers:")
    for i, layer_name in enumerate(deck.manager.get_layer_names()):
        print(f"  {i + 1}. {layer_name}")

    return deck


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    run_example("data")
