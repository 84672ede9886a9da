import datetime

import pytest
import pytz

from commute_routing.models import Itinerary

NOW = datetime.datetime(2025, 1, 6, 17, 0, tzinfo=pytz.utc)


def provider_time(dt, tz="America/Los_Angeles"):
    return {"value": int(dt.timestamp()), "time_zone": tz, "text": dt.strftime("%I:%M%p")}


def raw_route(summary, depart, arrive, steps=None, distance="3.2 mi"):
    """A directions provider route with a single leg."""
    return {
        "summary": summary,
        "legs": [{
            "duration": {"value": int((arrive - depart).total_seconds())},
            "departure_time": provider_time(depart),
            "arrival_time": provider_time(arrive),
            "distance": {"text": distance},
            "steps": steps or [],
        }],
    }


def make_itinerary(summary, depart_in_minutes, duration_minutes=30, now=NOW):
    depart = now + datetime.timedelta(minutes=depart_in_minutes)
    return Itinerary(
        summary=summary,
        total_duration=datetime.timedelta(minutes=duration_minutes),
        departure_time=depart,
        arrival_time=depart + datetime.timedelta(minutes=duration_minutes),
        distance_label="4.1 mi",
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW
