# tests/test_weather_normalize.py
"""
Test payload normalization, derived fields and METAR-style rendering.

All tests are non-DB (pure function tests).
"""

import pytest

from runway_ops.errors import FetchError
from runway_ops.weather.formatting import format_metar_style
from runway_ops.weather.normalize import (
    classify_precipitation,
    estimate_ceiling,
    extract_severe_flags,
    normalize_payload,
)

from conftest import build_payload


# ---------------------------------------------------------------------------
# Derived Field Tests
# ---------------------------------------------------------------------------

class TestEstimateCeiling:
    """Ceiling is estimated from cloud cover bands."""

    @pytest.mark.parametrize(
        "cover,expected",
        [(0, 10000), (10, 5000), (30, 3000), (60, 2000), (75, 1000), (100, 1000)],
    )
    def test_bands(self, cover, expected):
        assert estimate_ceiling(cover) == expected

    def test_missing_cover(self):
        assert estimate_ceiling(None) is None


class TestClassifyPrecipitation:
    """Measured intensity wins over condition text."""

    def test_rain_intensity(self):
        assert classify_precipitation("Rain", rain_1h=8.0) == "Heavy Rain"
        assert classify_precipitation("Rain", rain_1h=3.0) == "Moderate Rain"
        assert classify_precipitation("Rain", rain_1h=0.5) == "Light Rain"

    def test_snow_intensity(self):
        assert classify_precipitation("Snow", snow_1h=5.0) == "Heavy Snow"
        assert classify_precipitation("Snow", snow_1h=1.0) == "Light Snow"

    def test_condition_text_fallback(self):
        assert classify_precipitation("Drizzle") == "Drizzle"
        assert classify_precipitation("Rain") == "Rain"
        assert classify_precipitation("Snow") == "Snow"
        assert classify_precipitation("Clear") == "None"


class TestExtractSevereFlags:
    """Severe flags come from text, temperature and wind."""

    def test_text_flags(self):
        flags = extract_severe_flags("Thunderstorm", "thunderstorm with heavy rain")
        assert flags == ["thunderstorm"]

    def test_mist_and_haze(self):
        assert extract_severe_flags("Mist", "mist and haze") == ["mist", "haze"]

    def test_temperature_flags(self):
        assert extract_severe_flags("Clear", temperature=-25) == ["extreme_cold"]
        assert extract_severe_flags("Clear", temperature=46) == ["extreme_heat"]
        assert extract_severe_flags("Clear", temperature=20) == []

    def test_high_wind(self):
        assert extract_severe_flags("Clear", wind_speed=21) == ["high_wind"]
        assert extract_severe_flags("Clear", wind_speed=20) == []


# ---------------------------------------------------------------------------
# Payload Normalization Tests
# ---------------------------------------------------------------------------

class TestNormalizePayload:
    """Tests for provider payload normalization."""

    def test_full_payload(self):
        observation = normalize_payload(
            build_payload(wind_speed=7.7, wind_deg=270, gust=12.9, clouds=60, rain_1h=1.0,
                          condition="Rain", description="light rain")
        )
        reading = observation.reading
        assert reading.wind_speed == 7.7
        assert reading.wind_direction == 270
        assert reading.wind_gust == 12.9
        assert reading.ceiling == 2000
        assert reading.condition == "Rain"
        assert observation.precipitation == "Light Rain"
        assert observation.precip_intensity == 1.0
        assert observation.location_name == "Testville"

    def test_missing_wind_speed_is_fetch_error(self):
        payload = build_payload()
        del payload["wind"]["speed"]
        with pytest.raises(FetchError):
            normalize_payload(payload)

    def test_condition_object_is_fetch_error(self):
        payload = build_payload()
        payload["weather"] = {"main": "Rain"}
        with pytest.raises(FetchError):
            normalize_payload(payload)

    def test_out_of_range_is_fetch_error(self):
        with pytest.raises(FetchError):
            normalize_payload(build_payload(visibility=-5))

    def test_gust_below_sustained_is_dropped(self):
        observation = normalize_payload(build_payload(wind_speed=8, gust=6))
        assert observation.reading.wind_gust is None

    def test_missing_optional_fields(self):
        observation = normalize_payload(build_payload(visibility=None, clouds=None, wind_deg=None))
        assert observation.reading.visibility is None
        assert observation.reading.ceiling is None
        assert observation.reading.wind_direction is None

    def test_severe_flags_extracted(self):
        observation = normalize_payload(
            build_payload(condition="Thunderstorm", description="thunderstorm", temp=46)
        )
        assert observation.reading.severe_weather == ("thunderstorm", "extreme_heat")


# ---------------------------------------------------------------------------
# METAR Formatting Tests
# ---------------------------------------------------------------------------

class TestMetarFormat:
    """Tests for METAR-style rendering."""

    def test_rain_with_gusts(self):
        observation = normalize_payload(
            build_payload(wind_speed=7.7, wind_deg=270, gust=12.9, visibility=3000, clouds=60,
                          condition="Rain", description="light rain", rain_1h=1.0,
                          temp=14.2, pressure=1012)
        )
        assert format_metar_style(observation) == "27015G25KT 3000 -RA BKN020 14 Q1012"

    def test_variable_wind_clear_and_cold(self):
        observation = normalize_payload(
            build_payload(wind_speed=2, wind_deg=None, visibility=10000, clouds=0, temp=-3.4)
        )
        assert format_metar_style(observation) == "VRB04KT 9999 NSC M03 Q1013"

    def test_north_wind_reported_as_360(self):
        observation = normalize_payload(build_payload(wind_speed=5, wind_deg=2))
        assert format_metar_style(observation).startswith("36010KT")

    def test_heavy_rain_overcast(self):
        observation = normalize_payload(
            build_payload(condition="Rain", rain_1h=9.0, clouds=90, visibility=2000)
        )
        metar = format_metar_style(observation)
        assert "+RA" in metar
        assert "OVC010" in metar
