"""
Frequency control (QSY/QSX).

Retunes the rig bound to a transport before dialing and hands back a revert
action that restores the previous frequency afterwards.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Mapping, Optional

from ..exceptions import ParseError, QsyError, RigNotLoadedError
from ..parsers.base import FrequencyParser
from ..types import Frequency, Scheme

if TYPE_CHECKING:
    from ..config import DialerConfig

logger = logging.getLogger(__name__)

# Delay after QSY for the rig's PLL and filters to settle
QSY_SETTLE_DELAY = 3.0

# Delay before QSX so the link can finish its last transmission
QSX_DELAY = 1.0

RevertAction = Callable[[], None]


class RigHandle(ABC):
    """
    Radio-control capability (e.g. a hamlib rigctld connection).

    Rigs are owned by the embedding application; the dialer only looks them up.
    """

    @abstractmethod
    def get_freq(self) -> int:
        """Get the current VFO frequency in Hz."""
        pass

    @abstractmethod
    def set_freq(self, hz: int) -> None:
        """Set the VFO frequency in Hz."""
        pass


class RigLookup:
    """
    Resolves the rig bound to each transport scheme.

    Attributes:
        rigs: Loaded rigs by name
        bindings: Rig name configured per scheme
    """

    def __init__(
        self,
        rigs: Optional[Mapping[str, RigHandle]] = None,
        bindings: Optional[Mapping[Scheme, str]] = None
    ) -> None:
        self.rigs = dict(rigs or {})
        self.bindings = dict(bindings or {})

    @classmethod
    def from_config(
        cls,
        config: "DialerConfig",
        rigs: Optional[Mapping[str, RigHandle]] = None
    ) -> "RigLookup":
        """Build bindings from the ``rig`` field of each transport config."""
        candidates = {
            Scheme.ARDOP: config.ardop.rig,
            Scheme.PACTOR: config.pactor.rig,
            Scheme.VARAHF: config.varahf.rig,
            Scheme.VARAFM: config.varafm.rig,
            Scheme.AX25: config.ax25.rig,
        }
        bindings = {scheme: name for scheme, name in candidates.items() if name}
        return cls(rigs, bindings)

    def get(self, name: str) -> Optional[RigHandle]:
        return self.rigs.get(name)

    def rig_for(self, scheme: Scheme) -> tuple[Optional[RigHandle], str, bool]:
        """
        Look up the rig bound to a scheme.

        Returns:
            Tuple of (rig, rig name, found)
        """
        name = self.bindings.get(scheme, "")
        rig = self.rigs.get(name) if name else None
        return rig, name, rig is not None


class FrequencyController:
    """
    Performs QSY before a dial and QSX afterwards.

    Example:

    .. code-block:: python

        revert = controller.qsy(Scheme.ARDOP, "7050.0")
        try:
            ...  # dial
        finally:
            revert()
    """

    def __init__(
        self,
        rigs: RigLookup,
        settle_delay: float = QSY_SETTLE_DELAY,
        revert_delay: float = QSX_DELAY,
        sleep: Callable[[float], None] = time.sleep
    ) -> None:
        """
        Initialize frequency controller.

        Args:
            rigs: Rig lookup
            settle_delay: Seconds to wait after changing frequency
            revert_delay: Seconds to wait before restoring frequency
            sleep: Sleep function (injectable for testing)
        """
        self.rigs = rigs
        self.settle_delay = settle_delay
        self.revert_delay = revert_delay
        self._sleep = sleep
        self._parser = FrequencyParser()

    def qsy(self, scheme: Scheme, freq: str) -> RevertAction:
        """
        Change the rig bound to ``scheme`` to ``freq``.

        Args:
            scheme: Transport scheme whose rig should be retuned
            freq: Target frequency in kHz (e.g. "7050.0")

        Returns:
            Revert action restoring the previous frequency; runs at most once

        Raises:
            RigNotLoadedError: If no rig is loaded for the scheme
            QsyError: If the frequency is invalid or the rig rejects it
        """
        rig, name, found = self.rigs.rig_for(scheme)
        if not found:
            if name:
                raise RigNotLoadedError(f"hamlib rig '{name}' not loaded", scheme=str(scheme))
            raise RigNotLoadedError(f"No rig configured for {scheme}", scheme=str(scheme))

        try:
            target = self._parser.parse(freq)
        except ParseError as e:
            raise QsyError(f"Invalid frequency {freq!r}", scheme=str(scheme)) from e

        logger.info(f"QSY {scheme}: {freq}")

        try:
            old = Frequency(rig.get_freq())
        except Exception as e:
            raise QsyError(f"Unable to get rig frequency: {e}", scheme=str(scheme)) from e

        try:
            rig.set_freq(int(target))
        except Exception as e:
            self._restore(scheme, rig, old)
            raise QsyError(f"Unable to set rig frequency: {e}", scheme=str(scheme)) from e

        self._sleep(self.settle_delay)
        return self._revert_action(scheme, rig, old)

    def _revert_action(self, scheme: Scheme, rig: RigHandle, old: Frequency) -> RevertAction:
        lock = threading.Lock()
        done = False

        def revert() -> None:
            nonlocal done
            with lock:
                if done:
                    return
                done = True
            self._sleep(self.revert_delay)
            logger.info(f"QSX {scheme}: {old.khz:.3f}")
            self._restore(scheme, rig, old)

        return revert

    @staticmethod
    def _restore(scheme: Scheme, rig: RigHandle, freq: Frequency) -> None:
        try:
            rig.set_freq(int(freq))
        except Exception as e:
            logger.warning(f"Unable to restore {scheme} rig frequency to {freq}: {e}")

    def snapshot(self, scheme: Scheme) -> Optional[Frequency]:
        """Current frequency of the scheme's rig, or None if unavailable."""
        rig, _, found = self.rigs.rig_for(scheme)
        if not found:
            return None
        try:
            return Frequency(rig.get_freq())
        except Exception as e:
            logger.debug(f"Unable to read {scheme} rig frequency: {e}")
            return None
