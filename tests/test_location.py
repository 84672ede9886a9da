import subprocess
from unittest.mock import patch, MagicMock

import pytest
import requests

from commute_routing.errors import AllProvidersFailed, LocationProviderError, PreciseLocationError
from commute_routing.location import (
    DefaultLocationProvider,
    IpApiProvider,
    IpInfoProvider,
    LocationResolver,
    PlatformLocator,
    PreciseLocationProvider,
    PreciseLocationStatus,
    build_default_providers,
)


class StubProvider:
    def __init__(self, name, result=None, error=None):
        self.name = name
        self.result = result
        self.error = error
        self.calls = 0

    def attempt_resolve(self):
        self.calls += 1
        if self.error:
            raise LocationProviderError(self.error)
        return self.result


def mock_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def test_first_success_wins_and_later_providers_are_not_called():
    first = StubProvider("one", error="denied")
    second = StubProvider("two", error="timeout")
    third = StubProvider("three", result="47.620000,-122.350000")
    fourth = StubProvider("four", result="47.6062,-122.3321")

    resolver = LocationResolver([first, second, third, fourth])

    assert resolver.resolve_current_location() == "47.620000,-122.350000"
    assert fourth.calls == 0


def test_empty_payload_counts_as_failure():
    resolver = LocationResolver([StubProvider("blank", result="  "), StubProvider("ok", result="1,2")])
    assert resolver.resolve_current_location() == "1,2"


def test_all_providers_failed_carries_last_reason():
    resolver = LocationResolver([StubProvider("one", error="first"), StubProvider("two", error="second")])
    with pytest.raises(AllProvidersFailed) as excinfo:
        resolver.resolve_current_location()
    assert excinfo.value.last_reason == "second"
    assert excinfo.value.attempts == [("one", "first"), ("two", "second")]


def test_ip_api_success():
    payload = {"status": "success", "lat": 47.6097, "lon": -122.3331}
    with patch('requests.get', return_value=mock_response(payload)):
        assert IpApiProvider().attempt_resolve() == "47.609700,-122.333100"


def test_ip_api_failure_status():
    payload = {"status": "fail", "message": "private range"}
    with patch('requests.get', return_value=mock_response(payload)):
        with pytest.raises(LocationProviderError, match="private range"):
            IpApiProvider().attempt_resolve()


def test_ip_api_http_error():
    with patch('requests.get', return_value=mock_response({}, status_code=429)):
        with pytest.raises(LocationProviderError, match="429"):
            IpApiProvider().attempt_resolve()


def test_ipinfo_returns_loc_unchanged():
    with patch('requests.get', return_value=mock_response({"loc": "47.6062,-122.3321"})):
        assert IpInfoProvider().attempt_resolve() == "47.6062,-122.3321"


def test_ipinfo_missing_loc():
    with patch('requests.get', return_value=mock_response({"ip": "1.2.3.4"})):
        with pytest.raises(LocationProviderError):
            IpInfoProvider().attempt_resolve()


def test_network_error_is_provider_failure():
    with patch('requests.get', side_effect=requests.exceptions.ConnectionError("offline")):
        with pytest.raises(LocationProviderError):
            IpInfoProvider().attempt_resolve()


def test_chain_falls_back_to_default_when_offline():
    with patch('requests.get', side_effect=requests.exceptions.ConnectionError("offline")):
        resolver = LocationResolver(build_default_providers())
        assert resolver.resolve_current_location() == DefaultLocationProvider().location


def test_build_default_providers_order():
    providers = build_default_providers()
    assert [type(p) for p in providers] == [IpApiProvider, IpInfoProvider, DefaultLocationProvider]

    locator = PlatformLocator("termux-location")
    providers = build_default_providers(locator)
    assert isinstance(providers[0], PreciseLocationProvider)
    assert providers[0].locator is locator


def test_detect_without_command_returns_none():
    with patch('shutil.which', return_value=None):
        assert PlatformLocator.detect() is None


def run_result(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_platform_locator_success():
    with patch('shutil.which', return_value="/usr/bin/termux-location"), \
         patch('subprocess.run', return_value=run_result(stdout='{"latitude": 47.6, "longitude": -122.3}')) as mock_run:
        locator = PlatformLocator.detect()
        assert not locator.started
        assert locator.request_location() == "47.600000,-122.300000"
        assert locator.started
    assert mock_run.call_args.args[0][0] == "/usr/bin/termux-location"


@pytest.mark.parametrize("stderr,status", [
    ("Location permission denied", PreciseLocationStatus.PERMISSION_DENIED),
    ("Location services disabled", PreciseLocationStatus.SERVICES_DISABLED),
    ("no fix", PreciseLocationStatus.UNAVAILABLE),
])
def test_platform_locator_failure_codes(stderr, status):
    with patch('shutil.which', return_value="/usr/bin/termux-location"), \
         patch('subprocess.run', return_value=run_result(returncode=1, stderr=stderr)):
        with pytest.raises(PreciseLocationError) as excinfo:
            PlatformLocator("termux-location").request_location()
    assert excinfo.value.status is status


def test_platform_locator_timeout():
    with patch('shutil.which', return_value="/usr/bin/termux-location"), \
         patch('subprocess.run', side_effect=subprocess.TimeoutExpired(cmd="termux-location", timeout=10)):
        with pytest.raises(PreciseLocationError) as excinfo:
            PlatformLocator("termux-location").request_location()
    assert excinfo.value.status is PreciseLocationStatus.TIMED_OUT


def test_closed_locator_is_not_initialized():
    with patch('shutil.which', return_value="/usr/bin/termux-location"):
        with PlatformLocator("termux-location") as locator:
            pass
        with pytest.raises(PreciseLocationError) as excinfo:
            locator.request_location()
    assert excinfo.value.status is PreciseLocationStatus.NOT_INITIALIZED


def test_precise_failure_moves_on_to_next_provider():
    locator = PlatformLocator("CoreLocationCLI")
    with patch('shutil.which', return_value=None):
        resolver = LocationResolver([PreciseLocationProvider(locator), StubProvider("ip", result="1,2")])
        assert resolver.resolve_current_location() == "1,2"
