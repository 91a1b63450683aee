"""
Fault dispatcher.

Installs the process-wide fault hooks, turns every captured fault into an
ErrorRecord and runs the configured action pipeline: write the record to
the log sink, render it to the client, halt.

The dispatcher is an explicit service: construct one at startup and pass
it to whatever wires in hooks (application startup, middleware).
"""

import json
import sys
import threading
import warnings
from pprint import pformat
from typing import Any, Dict, Mapping, NoReturn, Optional, TextIO, Type, Union

from pydantic import ValidationError

from faultcatch.config import Settings
from faultcatch.exceptions import (
    ConfigurationError,
    DispatcherAlreadyInstalledError,
    FaultHalt,
    LogDestinationNotConfiguredError,
)
from faultcatch.models.error import ErrorRecord, snapshot_scope
from faultcatch.models.fault import ExceptionDetails, FaultLevel, FaultSource
from faultcatch.models.options import DispatcherOptions
from faultcatch.services.backtrace import (
    capture_stack,
    find_frame,
    first_external_frame,
    sanitize_backtrace,
)
from faultcatch.services.caller_address import current_request, get_caller_address
from faultcatch.services.classifier import classify_fault, level_for_warning
from faultcatch.services.log_sink import FileLogSink, LogSink
from faultcatch.services.suppression import is_suppressed
from faultcatch.utils.logging import get_logger, log_fault_captured

logger = get_logger(__name__)

# Fields kept when a record cannot be serialized even without scope and backtrace
MINIMAL_FIELDS = ("severity", "message", "file", "line", "raw_level", "timestamp")


class FaultDispatcher:
    """
    Captures faults and routes them to the log sink, the client and halt.

    Faults are handled one at a time; the dispatcher holds the record of
    the fault in flight and drops it once the pipeline has run.

    Warnings reach the dispatcher only when the active warnings filters
    show them. Under the standard "default" action a warning repeated at
    the same location is shown once; install an "always" filter to get a
    record for every occurrence.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        sink: Optional[LogSink] = None,
        output: Optional[TextIO] = None,
    ):
        """
        Initialize the fault dispatcher.

        Args:
            settings: Settings to seed options and log directory from
            sink: Log sink for serialized records (FileLogSink by default)
            output: Stream rendered faults are written to outside a request
                (sys.stdout at halt time by default)
        """
        self._options = DispatcherOptions()
        self._directory: Optional[str] = None
        self._exit_code = 1
        self._sink = sink
        self._output = output
        self._error: Optional[ErrorRecord] = None
        self._installed = False
        self._handling = False
        self._previous_excepthook = None
        self._previous_thread_excepthook = None
        self._previous_showwarning = None

        if settings is not None:
            self.configure(
                write=settings.write,
                display=settings.display,
                allowed_caller_addresses=settings.allowed_caller_addresses,
                included_fields=settings.included_fields,
            )
            self._directory = settings.log_directory
            self._exit_code = settings.exit_code

    # ------------------------------------------------------------------
    # Installation and configuration
    # ------------------------------------------------------------------

    @property
    def installed(self) -> bool:
        return self._installed

    @property
    def options(self) -> DispatcherOptions:
        return self._options

    @property
    def log_directory(self) -> Optional[str]:
        return self._directory

    def initialize(self) -> None:
        """
        Install this dispatcher as the process-wide fault handler.

        Replaces sys.excepthook, threading.excepthook and
        warnings.showwarning. The previous hooks are kept and restored by
        uninstall().

        Raises:
            DispatcherAlreadyInstalledError: If the hooks are already installed
        """
        if self._installed:
            raise DispatcherAlreadyInstalledError("Fault dispatcher hooks are already installed")

        self._previous_excepthook = sys.excepthook
        self._previous_thread_excepthook = threading.excepthook
        self._previous_showwarning = warnings.showwarning
        sys.excepthook = self._excepthook
        threading.excepthook = self._thread_excepthook
        warnings.showwarning = self._showwarning
        self._installed = True

        logger.info("Fault dispatcher installed")

    def uninstall(self) -> None:
        """Restore the hooks that were active before initialize()."""
        if not self._installed:
            return

        sys.excepthook = self._previous_excepthook
        threading.excepthook = self._previous_thread_excepthook
        warnings.showwarning = self._previous_showwarning
        self._previous_excepthook = None
        self._previous_thread_excepthook = None
        self._previous_showwarning = None
        self._installed = False

        logger.info("Fault dispatcher uninstalled")

    def configure(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        """
        Merge options into the current configuration.

        Args:
            options: Mapping of option names to values
            **kwargs: Options given as keyword arguments

        Raises:
            ConfigurationError: If an option or an included field is unknown,
                or a value has the wrong type
        """
        merged = self._options.model_dump()
        merged.update(options or {})
        merged.update(kwargs)

        try:
            self._options = DispatcherOptions.model_validate(merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid fault dispatcher options: {e}") from e

    def set_log_directory(self, directory: str) -> None:
        """
        Set the directory error records are written to.

        Args:
            directory: Log directory path
        """
        self._directory = str(directory)

    # ------------------------------------------------------------------
    # Hook entry points
    # ------------------------------------------------------------------

    def handle_error(
        self,
        level: Union[int, str],
        message: str,
        file: str,
        line: Union[int, str],
        scope_variables: Optional[Mapping[str, Any]] = None
    ) -> None:
        """
        Handle a non-fatal runtime fault.

        Args:
            level: Runtime error level (see FaultLevel)
            message: Fault message
            file: File where the fault occurred
            line: Line where the fault occurred
            scope_variables: Variables that existed in the scope of the fault
        """
        if is_suppressed():
            return

        error = ErrorRecord(
            file=str(file),
            message=str(message),
            raw_level=str(int(level)) if isinstance(level, int) else str(level),
            line=str(line),
            scope_variables=snapshot_scope(scope_variables),
            backtrace=capture_stack(),
        )
        error.severity = classify_fault(level)

        self._dispatch(error)

    def handle_exception(self, exception: Union[BaseException, FaultSource]) -> None:
        """
        Handle an uncaught exception.

        Args:
            exception: Raised exception, or an object exposing
                file, message, line, trace and code
        """
        if is_suppressed():
            return

        if isinstance(exception, BaseException):
            details = ExceptionDetails.from_exception(exception)
        else:
            details = exception

        error = ErrorRecord(
            file=str(details.file),
            message=str(details.message),
            line=str(details.line),
            backtrace=list(details.trace or []),
            raw_level=str(details.code),
        )
        error.severity = classify_fault(uncaught_exception=True)

        self._dispatch(error)

    def trigger(self, message: str, level: FaultLevel = FaultLevel.USER_NOTICE) -> None:
        """
        Raise a user-level fault from application code.

        The location and scope variables are taken from the caller.

        Args:
            message: Fault message
            level: Runtime error level, USER_NOTICE by default
        """
        frame = first_external_frame()
        if frame is None:
            self.handle_error(level, message, "", 0)
            return
        self.handle_error(level, message, frame.f_code.co_filename, frame.f_lineno, dict(frame.f_locals))

    # ------------------------------------------------------------------
    # Runtime hook adapters
    # ------------------------------------------------------------------

    def _excepthook(self, exc_type: Type[BaseException], exc_value: BaseException, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            self._previous_excepthook(exc_type, exc_value, exc_tb)
            return

        if exc_value.__traceback__ is None:
            exc_value = exc_value.with_traceback(exc_tb)
        self.handle_exception(exc_value)

    def _thread_excepthook(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_value is None or issubclass(args.exc_type, SystemExit):
            self._previous_thread_excepthook(args)
            return

        exc_value = args.exc_value
        if exc_value.__traceback__ is None:
            exc_value = exc_value.with_traceback(args.exc_traceback)
        try:
            self.handle_exception(exc_value)
        except SystemExit:
            # Halting ends only the failing thread
            logger.info(
                "Fault halted thread",
                extra={"failed_thread": args.thread.name if args.thread else None},
            )

    def _showwarning(self, message, category, filename, lineno, file=None, line=None) -> None:
        if self._handling:
            # Warning raised while a fault is being handled
            self._previous_showwarning(message, category, filename, lineno, file, line)
            return

        frame = find_frame(filename, lineno)
        scope_variables = dict(frame.f_locals) if frame is not None else None
        self.handle_error(level_for_warning(category), str(message), filename, lineno, scope_variables)

    # ------------------------------------------------------------------
    # Action pipeline
    # ------------------------------------------------------------------

    def _dispatch(self, error: ErrorRecord) -> None:
        """Enrich the record and run the action pipeline."""
        self._handling = True
        try:
            error.caller_address = get_caller_address()
            error.backtrace = sanitize_backtrace(error.backtrace)

            log_fault_captured(
                logger,
                severity=error.severity.value,
                raw_level=error.raw_level,
                message=error.message,
                caller_address=error.caller_address,
            )

            self._error = error
            self._action()
        finally:
            self._handling = False
            self._error = None

    def _action(self) -> None:
        """Determine what to do with the current record."""
        options = self._options

        if options.write:
            self._write_to_log()

        if options.display:
            self._display_error()
            return

        if options.write:
            self._halt()

    def _write_to_log(self) -> None:
        """Write the current record to the log sink, degrading if it cannot be serialized."""
        if self._directory is None:
            error = LogDestinationNotConfiguredError()
            logger.error(str(error))
            raise error

        sink = self._get_sink()
        sink.set_directory(self._directory)

        fields = self._options.included_fields
        serialized = self._error.serialize(fields)

        if serialized is None:
            logger.warning(
                "Error record could not be serialized, dropping scope variables and backtrace",
                extra={"severity": self._error.severity.value},
            )
            self._error.scope_variables = {}
            self._error.backtrace = []
            serialized = self._error.serialize(fields)

        if serialized is None:
            serialized = self._minimal_record()

        sink.write(serialized)

    def _minimal_record(self) -> str:
        """Serialize the fixed minimal field set as strings."""
        logger.warning("Error record could not be serialized, writing minimal record")
        data = self._error.model_dump(mode="json", include=set(MINIMAL_FIELDS))
        return json.dumps({name: str(data.get(name)) for name in MINIMAL_FIELDS})

    def _display_error(self) -> None:
        """Render the current record to the client and halt, if the caller may see it."""
        if not self._options.allows_caller(self._error.caller_address):
            logger.info(
                "Fault display suppressed for caller",
                extra={"caller_address": self._error.caller_address},
            )
            return

        self._halt(self.render(self._error))

    def render(self, error: ErrorRecord) -> str:
        """
        Render the client-facing view of a record.

        Args:
            error: Record to render

        Returns:
            Pretty-printed severity, message, location and sanitized backtrace
        """
        view: Dict[str, Any] = {
            "severity": error.severity.value if error.severity else None,
            "message": error.message,
            "file": error.file,
            "line": error.line,
            "backtrace": sanitize_backtrace(error.backtrace),
        }
        return pformat(view, sort_dicts=False)

    def _halt(self, body: Optional[str] = None) -> NoReturn:
        """
        Stop execution after a fault has been handled.

        Inside a request only the request is ended; otherwise the body is
        written to the output stream and the process exits.
        """
        if current_request() is not None:
            raise FaultHalt(body)

        if body is not None:
            output = self._output or sys.stdout
            output.write(body + "\n")
            output.flush()

        raise SystemExit(self._exit_code)

    def _get_sink(self) -> LogSink:
        """Return the log sink, creating the default file sink on first use."""
        if self._sink is None:
            self._sink = FileLogSink()
        return self._sink
