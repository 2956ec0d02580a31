import logging

from esports_track.errors import APIError
from esports_track.logging_utils import ProviderFailureLog, reset_skip_warnings, warn_provider_skipped

LOGGER = "esports_track.test.providers"


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_provider_failures_are_windowed_per_provider_and_code(caplog):
    clock = FakeClock()
    failures = ProviderFailureLog(logging.getLogger(LOGGER), window_seconds=60, clock=clock)
    timeout = APIError("stratz", "TIMEOUT", "slow")

    with caplog.at_level(logging.WARNING, logger=LOGGER):
        assert failures.failed("stratz", timeout) is True
        assert failures.failed("stratz", timeout) is False
        assert failures.failed("stratz", timeout) is False
        # other pairs have their own window
        assert failures.failed("opendota", APIError("opendota", "TIMEOUT", "slow")) is True
        assert failures.failed("stratz", APIError("stratz", "HTTP_ERROR", "503", status=503)) is True
        assert failures.suppressed("stratz", "TIMEOUT") == 2
        clock.now = 61
        assert failures.failed("stratz", timeout) is True
        assert failures.suppressed("stratz", "TIMEOUT") == 0

    assert [r.getMessage() for r in caplog.records] == [
        "provider_failed provider=stratz code=TIMEOUT status=None suppressed=0",
        "provider_failed provider=opendota code=TIMEOUT status=None suppressed=0",
        "provider_failed provider=stratz code=HTTP_ERROR status=503 suppressed=0",
        "provider_failed provider=stratz code=TIMEOUT status=None suppressed=2",
    ]


def test_provider_crash_is_logged_with_traceback(caplog):
    failures = ProviderFailureLog(logging.getLogger(LOGGER), clock=FakeClock())
    try:
        raise KeyError("teams")
    except KeyError as exc:
        crash = exc

    with caplog.at_level(logging.ERROR, logger=LOGGER):
        assert failures.crashed("pandascore", crash) is True
        assert failures.crashed("pandascore", crash) is False
        assert failures.crashed("pandascore", ValueError("bad")) is True

    first = caplog.records[0]
    assert first.levelno == logging.ERROR
    assert first.getMessage().startswith("provider_crashed provider=pandascore err='teams'")
    assert first.exc_info is not None
    assert failures.suppressed("pandascore", "KeyError") == 1


def test_zero_window_never_holds_back(caplog):
    failures = ProviderFailureLog(logging.getLogger(LOGGER), window_seconds=0, clock=FakeClock())
    exc = APIError("opendota", "NETWORK_ERROR", "down")
    with caplog.at_level(logging.WARNING, logger=LOGGER):
        assert failures.failed("opendota", exc) is True
        assert failures.failed("opendota", exc) is True
    assert len(caplog.records) == 2


def test_provider_skipped_is_reported_once(caplog):
    reset_skip_warnings()
    logger = logging.getLogger(LOGGER)
    with caplog.at_level(logging.WARNING, logger=LOGGER):
        assert warn_provider_skipped("pandascore", "no_api_key", logger=logger) is True
        assert warn_provider_skipped("pandascore", "no_api_key", logger=logger) is False
        assert warn_provider_skipped("stratz", "no_url", logger=logger) is True
    assert [r.getMessage() for r in caplog.records] == [
        "provider_skipped provider=pandascore reason=no_api_key",
        "provider_skipped provider=stratz reason=no_url",
    ]

    reset_skip_warnings()
    assert warn_provider_skipped("pandascore", "no_api_key", logger=logger) is True
    reset_skip_warnings()
