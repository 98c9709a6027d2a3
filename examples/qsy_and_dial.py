"""
QSY and dial example.

Dials an ARDOP station on a given frequency using mock hardware, then
cancels a second dial from another thread.
"""

import logging
import time

from radiodial import (
    ArdopConfig,
    Dialer,
    DialerConfig,
    MockModem,
    RigHandle,
    Scheme,
    StationConfig,
)


class PrintingRig(RigHandle):
    """Stand-in for a hamlib rig."""

    def __init__(self):
        self.freq = 14_105_000

    def get_freq(self):
        return self.freq

    def set_freq(self, hz):
        print(f"Rig -> {hz / 1e3:.3f} kHz")
        self.freq = hz


def exchange(stream, target):
    print(f"Exchanging messages with {target}")


def main():
    """Main function."""
    logging.basicConfig(level=logging.INFO)

    config = DialerConfig(
        station=StationConfig(mycall="LA5NTA"),
        ardop=ArdopConfig(rig="ic705"),
    )
    modem = MockModem("ardop")

    with Dialer(
        config,
        exchange=exchange,
        openers={Scheme.ARDOP: lambda config, descriptor: modem},
        rigs={"ic705": PrintingRig()},
    ) as dialer:
        dialer.status.subscribe(lambda d: print(f"Dialing: {d.target if d else '-'}"))

        ok = dialer.connect("ardop:///LA1B?freq=7050.0")
        print(f"First connect: {'ok' if ok else 'failed'}")

        # Second dial blocks until cancelled
        modem.block_dial = True
        ticket = dialer.start("ardop:///LA3F")
        time.sleep(0.5)
        ticket.cancel()
        print(f"Second connect: {'ok' if ticket.wait() else 'cancelled'}")


if __name__ == "__main__":
    main()
