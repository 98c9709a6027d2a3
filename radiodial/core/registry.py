"""
Modem registry.

Holds at most one live ModemHandle per transport scheme. Handles are opened
lazily, reused while healthy and replaced when a liveness probe fails or the
requested configuration changes.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Hashable, Mapping, Optional

from .transport import ModemHandle
from ..exceptions import InitError, RadioDialError
from ..types import ConnectionDescriptor, Scheme

if TYPE_CHECKING:
    from ..config import DialerConfig
    from ..features.frequency import RigLookup
    from ..features.profiles import TransportProfile

logger = logging.getLogger(__name__)


class ModemRegistry:
    """
    Sole owner of the per-scheme modem handles.

    All mutation is serialized by a single lock, so ``ensure`` never runs
    concurrently with itself.
    """

    def __init__(
        self,
        profiles: Mapping[Scheme, "TransportProfile"],
        config: "DialerConfig",
        rigs: Optional["RigLookup"] = None
    ) -> None:
        """
        Initialize modem registry.

        Args:
            profiles: Transport profile per scheme
            config: Dialer configuration passed to profile openers
            rigs: Rig lookup used to wire push-to-talk
        """
        self.profiles = profiles
        self.config = config
        self.rigs = rigs

        # scheme -> (handle, open key)
        self._handles: dict[Scheme, tuple[ModemHandle, Hashable]] = {}
        self._lock = threading.RLock()

        logger.info("Initialized modem registry")

    def ensure(
        self,
        scheme: Scheme,
        descriptor: Optional[ConnectionDescriptor] = None
    ) -> ModemHandle:
        """
        Get a ready modem handle for a scheme, opening one if needed.

        An existing handle is reused when its liveness probe succeeds and the
        descriptor does not require different open-time configuration.
        Otherwise the old handle is closed before a new one is opened.

        Args:
            scheme: Transport scheme
            descriptor: Descriptor about to be dialed (for open-time options)

        Returns:
            Registered ModemHandle

        Raises:
            InitError: If the modem cannot be opened or configured
        """
        profile = self.profiles.get(scheme)
        if profile is None:
            raise InitError(f"No transport profile for {scheme}", scheme=str(scheme))

        key = profile.open_key(descriptor)

        with self._lock:
            entry = self._handles.get(scheme)
            if entry is not None:
                handle, current_key = entry
                if current_key == key and self._is_healthy(scheme, handle):
                    logger.debug(f"Reusing {scheme} modem handle")
                    return handle

                if current_key != key:
                    logger.info(f"Reopening {scheme} modem for new configuration")
                self._discard(scheme)

            handle = self._open(scheme, profile, descriptor)
            self._handles[scheme] = (handle, key)
            logger.info(f"Registered {scheme} modem handle")
            return handle

    def _open(
        self,
        scheme: Scheme,
        profile: "TransportProfile",
        descriptor: Optional[ConnectionDescriptor]
    ) -> ModemHandle:
        try:
            handle = profile.open(self.config, descriptor)
        except InitError:
            raise
        except Exception as e:
            raise InitError(f"{scheme} initialization failed: {e}", scheme=str(scheme)) from e

        if handle is None:
            raise InitError(f"{scheme} initialization failed: no handle", scheme=str(scheme))

        try:
            profile.configure(handle, self.config, self.rigs)
        except Exception as e:
            self._close_handle(scheme, handle)
            if isinstance(e, InitError):
                raise
            raise InitError(f"Unable to configure {scheme} modem: {e}", scheme=str(scheme)) from e

        return handle

    def _is_healthy(self, scheme: Scheme, handle: ModemHandle) -> bool:
        try:
            handle.ping()
            return True
        except RadioDialError as e:
            logger.warning(f"{scheme} modem failed liveness probe: {e}")
        except Exception as e:
            logger.warning(f"{scheme} modem liveness probe error: {e}")
        return False

    def _discard(self, scheme: Scheme) -> None:
        entry = self._handles.pop(scheme, None)
        if entry is not None:
            self._close_handle(scheme, entry[0])

    @staticmethod
    def _close_handle(scheme: Scheme, handle: ModemHandle) -> None:
        try:
            handle.close()
            logger.info(f"Closed {scheme} modem handle")
        except Exception as e:
            logger.warning(f"Error closing {scheme} modem handle: {e}")

    def get(self, scheme: Scheme) -> Optional[ModemHandle]:
        """Get the registered handle for a scheme without probing it."""
        with self._lock:
            entry = self._handles.get(scheme)
            return entry[0] if entry else None

    def close(self, scheme: Scheme) -> bool:
        """
        Close and unregister the handle for a scheme.

        Returns:
            True if a handle was closed
        """
        with self._lock:
            if scheme not in self._handles:
                return False
            self._discard(scheme)
            return True

    def close_all(self) -> None:
        """Close every registered handle (process shutdown)."""
        with self._lock:
            for scheme in list(self._handles):
                self._discard(scheme)
        logger.info("Closed all modem handles")

    def schemes(self) -> list[Scheme]:
        with self._lock:
            return list(self._handles)

    def __contains__(self, scheme: Any) -> bool:
        with self._lock:
            return scheme in self._handles
