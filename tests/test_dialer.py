"""
Tests for the Dialer orchestrator.
"""

import pytest
from radiodial import Dialer, DialerConfig, StationConfig
from radiodial.exceptions import DialError
from radiodial.types import Scheme


def test_connect_success(dialer, modem_factory, exchange, event_log):
    """Test a plain successful connect and exchange."""
    assert dialer.connect("ardop:///LA1B") is True

    modem = modem_factory.modems(Scheme.ARDOP)[0]
    assert modem.dials[0].target == "LA1B"
    assert modem.dials[0].user == "LA5NTA"

    stream, target = exchange.calls[0]
    assert target == "LA1B"
    assert stream.closed is True

    assert len(event_log.records) == 1
    assert event_log.records[0].descriptor == "connect ardop:///LA1B"
    assert event_log.records[0].success is True
    assert dialer.dialing is None


def test_connect_empty_string(dialer, modem_factory):
    """Test that an empty descriptor is rejected."""
    assert dialer.connect("") is False
    assert modem_factory.opened == []


@pytest.mark.parametrize("value", [
    "LA1B",
    "carrier-pigeon:///LA1B?freq=7050.0",
    "ardop://?freq=7050.0",
])
def test_unparsable_has_no_side_effects(dialer, modem_factory, rig, event_log, value):
    """Test that parse failures open no modem and change no frequency."""
    assert dialer.connect(value) is False

    assert modem_factory.opened == []
    assert rig.history == []
    assert event_log.records == []


def test_freq_without_rig_does_not_dial(dialer, modem_factory, exchange):
    """Test that QSY on a scheme without a rig aborts before dialing."""
    assert dialer.connect("varahf:///LA1B?freq=7050.0") is False

    modem = modem_factory.modems(Scheme.VARAHF)[0]
    assert modem.dials == []
    assert exchange.calls == []


def test_qsy_reverted_after_success(dialer, rig, event_log):
    """Test that the frequency is restored after a successful connect."""
    assert dialer.connect("ardop:///LA1B?freq=7050.0") is True

    assert rig.history == [7_050_000, 14_105_000]
    assert rig.freq == 14_105_000
    assert event_log.records[0].frequency == 7_050_000


def test_qsy_reverted_after_dial_failure(dialer, modem_factory, rig):
    """Test that the frequency is restored after a failed dial."""
    modem = dialer.registry.ensure(Scheme.ARDOP)
    modem.dial_error = DialError("no answer")

    assert dialer.connect("ardop:///LA1B?freq=7050.0") is False

    assert rig.history == [7_050_000, 14_105_000]


def test_qsy_reverted_after_exchange_failure(dialer, exchange, rig):
    """Test that the frequency is restored when the exchange fails."""
    exchange.error = RuntimeError("B2F protocol error")

    assert dialer.connect("ardop:///LA1B?freq=7050.0") is False

    assert rig.history == [7_050_000, 14_105_000]


def test_qsy_failure_aborts(dialer, modem_factory, rig):
    """Test that a rejected QSY aborts before dialing."""
    rig.fail_set = True

    assert dialer.connect("ardop:///LA1B?freq=7050.0") is False

    assert modem_factory.modems(Scheme.ARDOP)[0].dials == []


def test_dial_failure(dialer, modem_factory, exchange, event_log):
    """Test that a failed dial returns False and is logged."""
    modem = dialer.registry.ensure(Scheme.TELNET)
    modem.dial_error = DialError("connection refused")

    assert dialer.connect("telnet://cms.winlink.org:8772/wl2k") is False

    assert exchange.calls == []
    record = event_log.records[0]
    assert record.success is False
    assert "connection refused" in record.error
    assert record.frequency is None


def test_init_failure(dialer, modem_factory):
    """Test that a modem that cannot be opened aborts the connect."""
    modem_factory.fail = True

    assert dialer.connect("ardop:///LA1B") is False


def test_radio_only_with_ssid(config, exchange, modem_factory):
    """Test that radio-only with an SSID callsign contacts no transport."""
    config.station = StationConfig(mycall="LA5NTA-1")
    dialer = Dialer(config, exchange=exchange, openers=modem_factory.openers())

    assert dialer.connect("ardop:///LA1B?radio_only=true") is False

    assert modem_factory.opened == []
    dialer.close()


def test_radio_only_unsupported_scheme(dialer, modem_factory):
    """Test that radio-only on packet schemes contacts no transport."""
    assert dialer.connect("ax25:///LA1B-10?radio_only=1") is False
    assert dialer.connect("serial-tnc:///LA1B-10?radio_only=1") is False

    assert modem_factory.opened == []


def test_radio_only_suffix(dialer, modem_factory):
    """Test that radio-only appends -T to the callsign."""
    assert dialer.connect("ardop:///LA1B?radio_only=true") is True

    assert modem_factory.modems(Scheme.ARDOP)[0].dials[0].user == "LA5NTA-T"


def test_radio_only_from_config(config, exchange, modem_factory):
    """Test the global radio-only option and its per-descriptor override."""
    config.radio_only = True
    dialer = Dialer(config, exchange=exchange, openers=modem_factory.openers())

    assert dialer.connect("varahf:///LA1B") is True
    assert dialer.connect("ax25:///LA1B-10?radio_only=false") is True

    assert modem_factory.modems(Scheme.VARAHF)[0].dials[0].user == "LA5NTA-T"
    assert modem_factory.modems(Scheme.AX25)[0].dials[0].user == "LA5NTA"
    dialer.close()


def test_defaults_ax25(dialer, modem_factory):
    """Test that AX.25 gets the configured port as interface."""
    assert dialer.connect("ax25:///LA1B-10") is True

    descriptor = modem_factory.modems(Scheme.AX25)[0].dials[0]
    assert descriptor.host == "wl2k"
    assert descriptor.user == "LA5NTA"


def test_defaults_serial_tnc(dialer, modem_factory):
    """Test serial TNC interface and baud-rate defaults."""
    assert dialer.connect("serial-tnc:///LA1B-10?custom=x") is True

    descriptor = modem_factory.modems(Scheme.SERIAL_TNC)[0].dials[0]
    assert descriptor.host == "/dev/ttyUSB0"
    assert descriptor.param("hbaud") == "1200"
    assert descriptor.param("serial_baud") == "9600"
    assert descriptor.param("custom") == "x"


def test_explicit_user_and_host_kept(dialer, modem_factory):
    """Test that descriptor values win over defaults."""
    assert dialer.connect("ax25://LA9XYZ@axport1/LA1B-10") is True

    descriptor = modem_factory.modems(Scheme.AX25)[0].dials[0]
    assert descriptor.host == "axport1"
    assert descriptor.user == "LA9XYZ"


def test_alias(dialer, modem_factory):
    """Test connecting through a chain of aliases."""
    assert dialer.connect("office") is True

    assert modem_factory.modems(Scheme.ARDOP)[0].dials[0].target == "LA1B"


def test_alias_cycle(dialer, modem_factory):
    """Test that cyclic aliases fail instead of recursing forever."""
    assert dialer.connect("loop-a") is False
    assert modem_factory.opened == []


def test_connect_any_short_circuits(dialer, modem_factory):
    """Test that connect_any stops at the first success."""
    result = dialer.connect_any(
        "not a descriptor",
        "telnet://cms.winlink.org:8772/wl2k",
        "ardop:///LA1B",
    )

    assert result is True
    assert len(modem_factory.modems(Scheme.TELNET)[0].dials) == 1
    assert modem_factory.modems(Scheme.ARDOP) == []


def test_connect_any_all_fail(dialer):
    """Test connect_any when every candidate fails."""
    assert dialer.connect_any("bad", "varahf:///LA1B?freq=7050.0") is False
    assert dialer.connect_any() is False


def test_modem_reused_between_connects(dialer, modem_factory):
    """Test that consecutive connects reuse the healthy modem."""
    assert dialer.connect("ardop:///LA1B") is True
    assert dialer.connect("ardop:///LA3F") is True

    assert len(modem_factory.modems(Scheme.ARDOP)) == 1


def test_busy_channel_waits(dialer, modem_factory):
    """Test that ARDOP waits for a clear channel before dialing."""
    modem = dialer.registry.ensure(Scheme.ARDOP)
    modem.busy_states = [True, True, False]

    assert dialer.connect("ardop:///LA1B") is True
    assert modem.busy_states == []


def test_busy_channel_timeout(dialer, modem_factory, rig):
    """Test that a channel that never clears aborts the dial."""
    modem = dialer.registry.ensure(Scheme.ARDOP)
    modem.busy_states = [True] * 1000

    assert dialer.connect("ardop:///LA1B?freq=7050.0") is False

    assert modem.dials == []
    assert rig.history == [7_050_000, 14_105_000]


def test_busy_channel_not_checked_for_packet(dialer, modem_factory):
    """Test that full-duplex/packet schemes skip the busy gate."""
    modem = dialer.registry.ensure(Scheme.AX25)
    modem.busy_states = [True] * 1000

    assert dialer.connect("ax25:///LA1B-10") is True


def test_status_notifications(dialer):
    """Test that subscribers see dialing start and end."""
    updates = []
    dialer.status.subscribe(updates.append)

    assert dialer.connect("ardop:///LA1B") is True
    dialer.status.flush(timeout=1.0)

    assert len(updates) == 2
    assert updates[0].target == "LA1B"
    assert updates[1] is None


def test_event_log_failure_does_not_mask_result(dialer, event_log):
    """Test that a broken event log does not change the outcome."""
    def broken(record):
        raise IOError("disk full")

    event_log.write = broken

    assert dialer.connect("ardop:///LA1B") is True


def test_context_manager_closes_modems(config, exchange, modem_factory):
    """Test that leaving the context closes every modem once."""
    with Dialer(config, exchange=exchange, openers=modem_factory.openers()) as dialer:
        dialer.connect("telnet://cms.winlink.org:8772/wl2k")

    modem = modem_factory.modems(Scheme.TELNET)[0]
    assert modem.close_count == 1


def test_default_config_values():
    """Test DialerConfig defaults."""
    config = DialerConfig(station=StationConfig(mycall="LA5NTA"))

    assert config.mycall == "LA5NTA"
    assert config.ardop.addr == "localhost:8515"
    assert config.ax25.port == "wl2k"
    assert config.busy_timeout == 300.0
