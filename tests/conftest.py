"""
Pytest configuration and fixtures.

Provides shared test fixtures for radiodial tests.
"""

import pytest
import logging

from radiodial import (
    Dialer,
    DialerConfig,
    StationConfig,
    ArdopConfig,
    MockModem,
    Scheme,
    RigHandle,
    RigLookup,
    FrequencyController,
    BusyChannelGate,
    EventLog,
)


# Enable logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class FakeRig(RigHandle):
    """Rig that remembers every frequency it was set to."""

    def __init__(self, freq: int = 14_105_000):
        self.freq = freq
        self.history: list[int] = []
        self.fail_get = False
        self.fail_set = False

    def get_freq(self) -> int:
        if self.fail_get:
            raise IOError("rigctld not responding")
        return self.freq

    def set_freq(self, hz: int) -> None:
        if self.fail_set:
            raise IOError("rigctld rejected frequency")
        self.history.append(hz)
        self.freq = hz


class RecordingEventLog(EventLog):
    """Event log keeping records in memory."""

    def __init__(self):
        self.records = []

    def write(self, record):
        self.records.append(record)


class ExchangeRecorder:
    """Exchange collaborator recording every call."""

    def __init__(self):
        self.calls = []
        self.error = None

    def __call__(self, stream, target):
        self.calls.append((stream, target))
        if self.error is not None:
            raise self.error


class ModemFactory:
    """Opens a new MockModem per call and remembers them all."""

    def __init__(self):
        self.opened: list[tuple[Scheme, MockModem]] = []
        self.fail = False

    def opener(self, scheme):
        def open_modem(config, descriptor):
            if self.fail:
                raise IOError("connection refused")
            modem = MockModem(name=scheme.value)
            self.opened.append((scheme, modem))
            return modem
        return open_modem

    def openers(self):
        return {scheme: self.opener(scheme) for scheme in Scheme}

    def modems(self, scheme):
        return [modem for s, modem in self.opened if s == scheme]


@pytest.fixture
def config():
    """Dialer configuration with an ARDOP rig binding and a few aliases."""
    return DialerConfig(
        station=StationConfig(mycall="LA5NTA", locator="JP20qh"),
        ardop=ArdopConfig(rig="ic705"),
        aliases={
            "home": "ardop:///LA1B",
            "office": "home",
            "loop-a": "loop-b",
            "loop-b": "loop-a",
        },
        busy_timeout=1.0,
    )


@pytest.fixture
def rig():
    return FakeRig()


@pytest.fixture
def event_log():
    return RecordingEventLog()


@pytest.fixture
def exchange():
    return ExchangeRecorder()


@pytest.fixture
def modem_factory():
    return ModemFactory()


@pytest.fixture
def dialer(config, rig, event_log, exchange, modem_factory):
    """
    Create a Dialer with mock modems for every scheme and no delays.

    Example:
        def test_something(dialer, exchange):
            assert dialer.connect("telnet://cms.winlink.org:8772/wl2k")
            assert exchange.calls[0][1] == "wl2k"
    """
    rigs = {"ic705": rig}
    frequency = FrequencyController(
        RigLookup.from_config(config, rigs),
        settle_delay=0,
        revert_delay=0
    )
    busy_gate = BusyChannelGate(
        ignore_busy=config.ignore_busy,
        poll_interval=0.01,
        max_wait=config.busy_timeout
    )
    instance = Dialer(
        config,
        exchange=exchange,
        openers=modem_factory.openers(),
        rigs=rigs,
        frequency=frequency,
        busy_gate=busy_gate,
        event_log=event_log,
    )
    yield instance
    instance.close()
