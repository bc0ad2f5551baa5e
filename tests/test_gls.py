import json
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from conftest import FakeProvider, load_fixture
from shipment_tracker.config import GLSSettings, TrackerSettings
from shipment_tracker.const import GLS_TRACKING_URLS
from shipment_tracker.exceptions import CarrierError, DecodeError, FetchError
from shipment_tracker.models import TrackStatus
from shipment_tracker.trackers.gls import GLS, GLS_STATUSES, resolve_status

BERLIN = ZoneInfo("Europe/Berlin")


def _payload(evt_nos, status_info="INTRANSIT", signature=None):
    status = {
        "history": [
            {
                "date": "2024-05-0%d" % (i + 1),
                "time": "10:00:00",
                "evtDscr": f"event {i}",
                "address": {"city": "Hamburg", "countryName": "Germany"},
            }
            for i in range(len(evt_nos))
        ],
        "progressBar": {"statusInfo": status_info, "evtNos": list(evt_nos)},
    }
    if signature is not None:
        status["signature"] = {"value": signature}
    return json.dumps({"tuStatus": [status]})


def _short_event_numbers():
    data = json.loads(_payload(["0.0", "1.0"]))
    data["tuStatus"][0]["progressBar"]["evtNos"] = ["0.0"]
    return json.dumps(data)


@pytest.mark.parametrize(
    "status, codes", [(status, sorted(codes)) for status, codes in GLS_STATUSES.items()]
)
def test_table_codes_resolve_to_their_status(status, codes):
    for code in codes:
        assert resolve_status(code, "DELIVERED") is status


@pytest.mark.parametrize("code", ["99.999", "3.1", "", None])
def test_unknown_codes(code):
    assert resolve_status(code, "DELIVERED") is TrackStatus.UNKNOWN


@pytest.mark.parametrize("progress", ["INTRANSIT", "DELIVEREDPS", None])
def test_delivered_downgraded_until_progress_bar_agrees(progress):
    for code in GLS_STATUSES[TrackStatus.DELIVERED]:
        assert resolve_status(code, progress) is TrackStatus.IN_TRANSIT


def test_tracking_url_languages():
    gls = GLS()
    assert gls.tracking_url("ABC123", "en") == f"{GLS_TRACKING_URLS['en']}?match=ABC123"
    assert gls.tracking_url("ABC123") == f"{GLS_TRACKING_URLS['de']}?match=ABC123"
    # unknown languages fall back to the default page
    assert gls.tracking_url("ABC123", "fr") == f"{GLS_TRACKING_URLS['de']}?match=ABC123"


def test_tracking_url_params_replace_defaults():
    url = GLS().tracking_url("ABC123", "en", {"foo": "bar"})
    assert url == f"{GLS_TRACKING_URLS['en']}?foo=bar"


def test_configured_language_is_the_default():
    gls = GLS(settings=TrackerSettings(language="en"))
    assert gls.tracking_url("ABC123") == f"{GLS_TRACKING_URLS['en']}?match=ABC123"


def test_unknown_language_falls_back_to_configured_language():
    gls = GLS(settings=TrackerSettings(language="en"))
    assert gls.tracking_url("ABC123", "fr") == f"{GLS_TRACKING_URLS['en']}?match=ABC123"


def test_endpoint_url():
    gls = GLS()
    assert gls.endpoint_url("ABC123") == (
        "https://gls-group.eu/app/service/open/rest/DE/de/rstt001?match=ABC123"
    )
    assert gls.endpoint_url("ABC123", "en").startswith(
        "https://gls-group.eu/app/service/open/rest/DE/en/rstt001?"
    )


def test_track_delivered():
    provider = FakeProvider(load_fixture("gls_delivered.json"))
    track = GLS(provider).track("ZX81", "en")

    assert provider.calls[0][0].endswith("/DE/en/rstt001?match=ZX81")
    assert len(track.events) == 4
    timestamps = [e.timestamp for e in track.events]
    assert timestamps == sorted(timestamps)
    assert [e.additional_details["eventNumber"] for e in track.events] == ["0.0", "2.106", "11.0", "3.0"]
    assert track.current_status() is TrackStatus.DELIVERED
    assert track.recipient == "MUELLER"

    first = track.events[0]
    assert first.location == "Frankfurt, Germany"
    assert first.description == "The parcel was handed over to GLS."
    assert first.timestamp == datetime(2024, 3, 11, 16, 20, 1, tzinfo=BERLIN)


def test_track_parcel_shop():
    track = GLS(FakeProvider(load_fixture("gls_parcelshop.json"))).track("ZX82")

    assert [e.status for e in track.events] == [
        TrackStatus.IN_TRANSIT,
        TrackStatus.UNKNOWN,
        TrackStatus.PICKUP,
        # 3.121 while the progress bar says DELIVEREDPS
        TrackStatus.IN_TRANSIT,
    ]
    assert track.recipient is None
    assert track.get_additional_details("parcelShop")["name1"] == "Kiosk am Markt"


def test_delivered_without_signature_leaves_recipient_unset():
    track = GLS(FakeProvider(_payload(["0.0", "3.0"], "DELIVERED"))).track("ZX83")
    assert track.current_status() is TrackStatus.DELIVERED
    assert track.recipient is None


def test_downgraded_event_does_not_set_recipient():
    track = GLS(FakeProvider(_payload(["0.0", "3.0"], "INTRANSIT", "DOE"))).track("ZX84")
    assert track.events[-1].status is TrackStatus.IN_TRANSIT
    assert track.recipient is None


def test_pickup_without_parcel_shop_details():
    track = GLS(FakeProvider(_payload(["2.124"]))).track("ZX85")
    assert track.get_additional_details("parcelShop") == {}


def test_configured_timezone():
    settings = TrackerSettings(gls=GLSSettings(timezone="UTC"))
    track = GLS(FakeProvider(_payload(["0.0"])), settings).track("ZX86")
    assert track.events[0].timestamp.utcoffset().total_seconds() == 0


def test_exception_text_fails_with_carrier_error():
    with pytest.raises(CarrierError) as exc:
        GLS(FakeProvider(load_fixture("gls_not_found.json"))).track("NOPE")
    assert exc.value.text == "No data found for the requested parcel number."
    assert exc.value.parcel_number == "NOPE"
    assert "NOPE" in str(exc.value)


@pytest.mark.parametrize(
    "body",
    [
        "",
        "not json",
        "{}",
        json.dumps({"tuStatus": []}),
        json.dumps({"tuStatus": [{"history": []}]}),
        _short_event_numbers(),
    ],
)
def test_malformed_payload(body):
    with pytest.raises(DecodeError) as exc:
        GLS(FakeProvider(body)).track("BAD2")
    assert exc.value.parcel_number == "BAD2"
    assert "BAD2" in str(exc.value)


def test_transport_failure(failing_provider):
    with pytest.raises(FetchError) as exc:
        GLS(failing_provider).track("ZX87")
    assert exc.value.parcel_number == "ZX87"
    assert exc.value.__cause__ is not None


def test_missing_description_is_kept_as_empty_text():
    data = json.loads(_payload(["0.0", "1.0"]))
    del data["tuStatus"][0]["history"][1]["evtDscr"]
    track = GLS(FakeProvider(json.dumps(data))).track("ZX88")
    assert len(track.events) == 2
    assert track.events[1].description == ""
