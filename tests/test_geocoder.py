import asyncio

import httpx

from parkwatch.config.settings import get_settings
from parkwatch.core.geo import Coordinate
from parkwatch.ingestion.geocoder import ReverseGeocoder, extract_locality

FRAUENKIRCHE = Coordinate(lat=51.0519, lon=13.7415)


def _geocoder(handler) -> ReverseGeocoder:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ReverseGeocoder(get_settings(), http=http)


def test_resolve_locality_returns_city():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"display_name": "Neumarkt, Dresden", "address": {"road": "Neumarkt", "city": "Dresden"}},
        )

    assert asyncio.run(_geocoder(handler).resolve_locality(FRAUENKIRCHE)) == "Dresden"
    assert seen[0].url.path == "/reverse"
    assert seen[0].url.params["lat"] == "51.051900"
    assert seen[0].url.params["format"] == "jsonv2"


def test_resolve_locality_falls_back_to_town():
    handler = lambda _r: httpx.Response(200, json={"address": {"town": "Radebeul"}})  # noqa: E731
    assert asyncio.run(_geocoder(handler).resolve_locality(FRAUENKIRCHE)) == "Radebeul"


def test_resolve_locality_is_silent_on_failures():
    def down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    for handler in (
        down,
        lambda _r: httpx.Response(500),
        lambda _r: httpx.Response(200, content=b"not json"),
        lambda _r: httpx.Response(200, json={"error": "Unable to geocode"}),
    ):
        assert asyncio.run(_geocoder(handler).resolve_locality(FRAUENKIRCHE)) is None


def test_extract_locality_ignores_unusable_payloads():
    assert extract_locality([]) is None
    assert extract_locality({"address": "Dresden"}) is None
    assert extract_locality({"address": {"country": "Deutschland"}}) is None
    assert extract_locality({"address": {"city": "  ", "village": "Moritzburg"}}) == "Moritzburg"
