# -*- coding: utf-8 -*-
"""Tests for geocoding and climate downloads, with the HTTP layer replaced by fakes."""

import io
import os
import zipfile

import pytest
import requests

from geoslides import climate_stack, download_climate, geocode, geocode_to_layer, write_raster
from geoslides.web import http_utils
from geoslides.web.climate import climate_archive_name


class FakeResponse:
    """Just enough of requests.Response for the code under test."""

    def __init__(self, payload=None, content=b"", status_code=200):
        self.payload = payload
        self.content = content
        self.status_code = status_code
        self.closed = False

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start : start + chunk_size]

    def close(self):
        self.closed = True


@pytest.fixture
def fake_get(monkeypatch):
    """Fixture that records requests and answers them with a configurable response."""
    calls = []
    state = {"response": FakeResponse(payload=[])}

    def _get(url, **kwargs):
        calls.append((url, kwargs))
        response = state["response"]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(http_utils.requests, "get", _get)
    state["calls"] = calls
    return state


def test_geocode_returns_lon_lat(fake_get):
    fake_get["response"] = FakeResponse(payload=[{"lon": "2.3212", "lat": "48.8656", "display_name": "Concorde"}])

    lon, lat = geocode("Place de la Concorde, Paris")

    assert (lon, lat) == (2.3212, 48.8656)
    url, kwargs = fake_get["calls"][0]
    assert url.endswith("/search")
    assert kwargs["params"]["q"] == "Place de la Concorde, Paris"
    assert "User-Agent" in kwargs["headers"]
    assert kwargs["timeout"] > 0


def test_geocode_to_layer(fake_get):
    fake_get["response"] = FakeResponse(payload=[{"lon": "15.97", "lat": "45.81"}])

    layer = geocode_to_layer("Zagreb")
    assert layer.objects.crs.to_epsg() == 4326
    assert layer.objects.geometry.iloc[0].x == pytest.approx(15.97)
    assert layer.objects["address"].iloc[0] == "Zagreb"


def test_geocode_not_found(fake_get):
    with pytest.raises(LookupError, match="not found"):
        geocode("Nowhere at all 123")


def test_geocode_empty_address(fake_get):
    with pytest.raises(ValueError):
        geocode("   ")
    assert fake_get["calls"] == []


def test_geocode_provider_errors_propagate(fake_get):
    fake_get["response"] = FakeResponse(status_code=429)
    with pytest.raises(requests.HTTPError):
        geocode("Paris")

    fake_get["response"] = requests.ConnectionError("offline")
    with pytest.raises(requests.ConnectionError):
        geocode("Paris")
    assert len(fake_get["calls"]) == 2


def _worldclim_zip(tmp_path, grid_layer, stem):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for month in ("01", "02"):
            tif = tmp_path / f"{stem}_{month}.tif"
            write_raster(str(tif), grid_layer.raster, grid_layer.transform, grid_layer.crs)
            archive.write(tif, arcname=tif.name)
        archive.writestr("readme.txt", "not a raster")
    return buffer.getvalue()


def test_archive_name_validation():
    assert climate_archive_name("tavg", 10) == "wc2.1_10m_tavg"
    assert climate_archive_name("prec", 0.5) == "wc2.1_30s_prec"

    with pytest.raises(ValueError, match="climate variable"):
        climate_archive_name("snow", 10)
    with pytest.raises(ValueError, match="resolution"):
        climate_archive_name("tavg", 1)


def test_download_climate(tmp_path, fake_get, grid_layer):
    stem = "wc2.1_10m_tavg"
    fake_get["response"] = FakeResponse(content=_worldclim_zip(tmp_path, grid_layer, stem))
    target = tmp_path / "worldclim"

    paths = download_climate("tavg", 10, str(target), base_url="https://example.org/wc")

    assert [os.path.basename(p) for p in paths] == [f"{stem}_01.tif", f"{stem}_02.tif"]
    url, kwargs = fake_get["calls"][0]
    assert url == f"https://example.org/wc/{stem}.zip"
    assert kwargs["stream"] is True
    assert fake_get["response"].closed
    assert not (target / f"{stem}.zip.part").exists()

    fake_get["response"] = requests.ConnectionError("offline")
    stack = climate_stack("tavg", 10, str(target))
    assert stack.count == 2
    assert stack.name == stem
    assert len(fake_get["calls"]) == 1


def test_download_failure_leaves_no_file(tmp_path, fake_get):
    fake_get["response"] = FakeResponse(status_code=404)

    with pytest.raises(requests.HTTPError):
        download_climate("bio", 5, str(tmp_path))
    assert os.listdir(tmp_path) == []
