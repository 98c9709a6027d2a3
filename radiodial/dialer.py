"""
Main Dialer class.

User-facing API that resolves a connection descriptor, prepares the modem and
rig, and supervises a cancellable dial.
"""

import logging
import threading
from contextlib import ExitStack
from typing import Any, Callable, Mapping, Optional

from .config import DialerConfig
from .core import (
    DialSession,
    EventLog,
    LoggingEventLog,
    ModemHandle,
    ModemRegistry,
    StatusNotifier,
)
from .core.session import close_quietly
from .exceptions import (
    DialCancelledError,
    InitError,
    ParseError,
    QsyError,
    RadioDialError,
    RadioOnlyError,
    RigNotLoadedError,
)
from .features import (
    BusyChannelGate,
    FrequencyController,
    Opener,
    RigHandle,
    RigLookup,
    TransportProfile,
    default_profiles,
)
from .parsers import AliasResolver, BoolValueParser, DescriptorParser
from .types import ConnectionDescriptor, Frequency, Scheme

logger = logging.getLogger(__name__)

# Runs the session exchange over a connected stream; raises on failure
ExchangeCallback = Callable[[Any, str], None]


class DialTicket:
    """
    Handle to a connect running in the background.

    Returned by :meth:`Dialer.start`. Cancelling a ticket only ever affects
    the dial it started.
    """

    def __init__(self, connect_str: str) -> None:
        self.connect_str = connect_str
        self.result: Optional[bool] = None
        self._lock = threading.Lock()
        self._session: Optional[DialSession] = None
        self._cancel_requested = False
        self._done = threading.Event()

    def _attach(self, session: DialSession) -> None:
        with self._lock:
            self._session = session
            cancel = self._cancel_requested
        if cancel:
            session.cancel()

    def _complete(self, result: bool) -> None:
        self.result = result
        self._done.set()

    def cancel(self) -> None:
        """Cancel this ticket's dial (no-op once it has finished)."""
        with self._lock:
            self._cancel_requested = True
            session = self._session
        if session is not None:
            session.cancel()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[bool]:
        """
        Wait for the connect to finish.

        Returns:
            The connect result, or None if still running at timeout
        """
        self._done.wait(timeout)
        return self.result

    def __repr__(self) -> str:
        return f"<DialTicket {self.connect_str!r} done={self.done} result={self.result}>"


class Dialer:
    """
    Connection dispatch and radio-session orchestrator.

    Coordinates:
    - registry: One live modem handle per transport scheme
    - frequency: QSY before and QSX after the dial
    - busy_gate: Waiting out a busy shared channel
    - status: Push notifications of the "currently dialing" state
    - event_log: One record per dial attempt

    At most one dial is active at a time; starting a new one cancels the
    previous dial.

    Example usage:

    .. code-block:: python

        config = DialerConfig(station=StationConfig(mycall="LA5NTA"))
        with Dialer(config, exchange=run_exchange, rigs={"ic705": rig}) as dialer:
            dialer.status.subscribe(lambda d: print(f"Dialing: {d}"))
            ok = dialer.connect_any("ardop:///LA1B?freq=7050.0", "telnet://cms.winlink.org:8772/wl2k")

    Cancelling from another thread:

    .. code-block:: python

        ticket = dialer.start("varahf:///LA1B")
        ...
        ticket.cancel()          # or dialer.cancel()
        ticket.wait()
    """

    def __init__(
        self,
        config: DialerConfig,
        exchange: ExchangeCallback,
        openers: Optional[Mapping[Scheme, Opener]] = None,
        rigs: Optional[Mapping[str, RigHandle]] = None,
        profiles: Optional[Mapping[Scheme, TransportProfile]] = None,
        registry: Optional[ModemRegistry] = None,
        frequency: Optional[FrequencyController] = None,
        busy_gate: Optional[BusyChannelGate] = None,
        status: Optional[StatusNotifier] = None,
        event_log: Optional[EventLog] = None
    ) -> None:
        """
        Initialize dialer.

        Args:
            config: Dialer configuration
            exchange: Called with (stream, target) once connected
            openers: Modem openers by scheme (ARDOP, VARA, AX.25 handles)
            rigs: Loaded rigs by name, bound to schemes by config
            profiles: Transport profiles (default: one per supported scheme)
            registry: Modem registry (default: built from profiles)
            frequency: QSY/QSX controller (default: built from rigs)
            busy_gate: Busy-channel gate (default: from config)
            status: Status notifier (default: new notifier)
            event_log: Connection event log (default: logging)
        """
        self.config = config
        self._exchange = exchange

        self.rigs = RigLookup.from_config(config, rigs)
        self.profiles = dict(profiles) if profiles is not None else default_profiles(openers)
        self.registry = registry or ModemRegistry(self.profiles, config, self.rigs)
        self.frequency = frequency or FrequencyController(self.rigs)
        self.busy_gate = busy_gate or BusyChannelGate(
            ignore_busy=config.ignore_busy,
            max_wait=config.busy_timeout
        )
        self.status = status or StatusNotifier()
        self.event_log = event_log or LoggingEventLog()

        self._parser = DescriptorParser()
        self._bool_parser = BoolValueParser()
        self._aliases = AliasResolver(config.aliases)

        self._session: Optional[DialSession] = None
        self._session_lock = threading.Lock()

        logger.info(f"Initialized Dialer for {config.mycall}")

    @property
    def dialing(self) -> Optional[ConnectionDescriptor]:
        """Descriptor currently being dialed, or None."""
        with self._session_lock:
            return self._session.descriptor if self._session else None

    def connect_any(self, *connect_strs: str) -> bool:
        """
        Try each descriptor in order until one succeeds.

        Returns:
            True if any connect succeeded
        """
        for connect_str in connect_strs:
            if self.connect(connect_str):
                return True
        return False

    def connect(self, connect_str: str) -> bool:
        """
        Dial a remote station and run the exchange.

        Args:
            connect_str: Descriptor string or connect alias

        Returns:
            True if the connection and exchange succeeded. Diagnostics are
            logged; no exception escapes.
        """
        return self._connect(connect_str, None)

    def start(self, connect_str: str) -> DialTicket:
        """
        Run :meth:`connect` on a background thread.

        Returns:
            DialTicket for cancelling and awaiting the attempt
        """
        ticket = DialTicket(connect_str)

        def run() -> None:
            result = False
            try:
                result = self._connect(connect_str, ticket)
            finally:
                ticket._complete(result)

        threading.Thread(target=run, daemon=True, name="ConnectThread").start()
        return ticket

    def cancel(self) -> bool:
        """
        Abort the dial in progress.

        Returns:
            True if a dial was cancelled, False if none was active
        """
        with self._session_lock:
            session = self._session
            self._session = None

        if session is None:
            return False

        self.status.publish(None)
        return session.cancel()

    def _connect(self, connect_str: str, ticket: Optional[DialTicket]) -> bool:
        if not connect_str:
            return False

        try:
            resolved = self._aliases.resolve(connect_str)
            logger.debug(f"connectStr: {resolved}")
            descriptor = self._parser.parse(resolved)
        except ParseError as e:
            logger.error(f"Invalid connect string {connect_str!r}: {e}")
            return False

        profile = self.profiles.get(descriptor.scheme)
        if profile is None:
            logger.error(f"No transport profile for {descriptor.scheme}")
            return False

        radio_only = self._radio_only(descriptor)
        try:
            if radio_only:
                profile.check_radio_only(self.config.mycall)
            handle = self.registry.ensure(descriptor.scheme, descriptor)
        except (RadioOnlyError, InitError) as e:
            logger.error(str(e))
            return False

        descriptor = profile.apply_defaults(descriptor, self.config)
        if radio_only:
            descriptor = profile.apply_radio_only(descriptor)

        with ExitStack() as cleanup:
            freq = descriptor.param("freq")
            if freq:
                try:
                    revert = self.frequency.qsy(descriptor.scheme, freq)
                except (RigNotLoadedError, QsyError) as e:
                    logger.error(f"Unable to QSY: {e}")
                    return False
                cleanup.callback(revert)
            else:
                revert = None

            current_freq = self.frequency.snapshot(descriptor.scheme)

            if profile.shared_medium:
                try:
                    self.busy_gate.wait_clear(handle)
                except RadioDialError as e:
                    logger.error(f"Unable to establish connection to remote: {e}")
                    return False

            session = DialSession(descriptor, revert, current_freq)
            self._begin_session(session)
            cleanup.callback(self._end_session, session)
            if ticket is not None:
                ticket._attach(session)

            stream = self._dial(session, handle, connect_str)
            if stream is None:
                return False
            cleanup.callback(close_quietly, stream)

            try:
                self._exchange(stream, descriptor.target)
            except Exception as e:
                logger.error(f"Exchange failed: {e}", exc_info=True)
                return False

            logger.info("Disconnected.")
            return True

    def _dial(self, session: DialSession, handle: ModemHandle, connect_str: str) -> Any:
        descriptor = session.descriptor
        logger.info(f"Connecting to {descriptor.target} ({descriptor.scheme})...")

        stream = None
        error: Optional[RadioDialError] = None
        try:
            stream = session.run(lambda token: handle.dial(descriptor, token))
        except RadioDialError as e:
            error = e
        finally:
            self._end_session(session)

        self._log_event(f"connect {connect_str}", session.frequency, stream, error)

        if isinstance(error, DialCancelledError):
            logger.info("Connect cancelled")
            return None
        if error is not None:
            logger.error(f"Unable to establish connection to remote: {error}")
            return None
        if stream is None:
            logger.error("Unable to establish connection to remote: no stream")
            return None
        return stream

    def _begin_session(self, session: DialSession) -> None:
        with self._session_lock:
            previous = self._session
            self._session = session

        if previous is not None:
            logger.warning(f"Cancelling previous dial to {previous.descriptor.target}")
            previous.cancel()

        self.status.publish(session.descriptor)

    def _end_session(self, session: DialSession) -> None:
        if session.finished:
            return
        session.finish()

        with self._session_lock:
            active = self._session is session
            if active:
                self._session = None

        if active:
            self.status.publish(None)

    def _radio_only(self, descriptor: ConnectionDescriptor) -> bool:
        value = descriptor.param("radio_only")
        if not value:
            return self.config.radio_only
        try:
            return self._bool_parser.parse(value)
        except ParseError:
            logger.warning(f"Invalid radio_only value {value!r}, treating as false")
            return False

    def _log_event(
        self,
        connect_str: str,
        frequency: Optional[Frequency],
        stream: Any,
        error: Optional[BaseException]
    ) -> None:
        try:
            self.event_log.log_connection(connect_str, frequency, stream, error)
        except Exception as e:
            logger.warning(f"Failed to write connection event: {e}")

    def close(self) -> None:
        """Cancel any active dial, close all modems and stop notifications."""
        self.cancel()
        self.registry.close_all()
        self.status.stop()
        logger.info("Dialer closed")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        dialing = self.dialing
        status = f"dialing {dialing.target}" if dialing else "idle"
        return f"<Dialer {self.config.mycall} status={status}>"
