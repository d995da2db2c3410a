# jqline:header:start
#
#   project      : jqline
#   file         : runner.py
#   file_relpath : src/jqline/pipeline/runner.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Drive a compiled program over an input stream and write its results.

The [`Runner`][jqline.pipeline.runner.Runner] pulls one record at a time from
the input iterator, evaluates the program on it and writes every result
through the marshaler. Failures are reported as they happen and recorded;
they never end the run. Only ``halt`` / ``halt_error`` stop it early.

Exit code of a run:

- the halt exit code, when the program halted;
- ``DEFAULT_ERROR`` when anything failed;
- with ``--exit-status``, derived from the last printed value of the whole
  run (``FALSY`` for ``null`` / ``false``, ``NO_VALUE`` if nothing was printed);
- ``SUCCESS`` otherwise.
"""

from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from jqline.config.logging import get_logger
from jqline.config.model import OutputFormat
from jqline.constants import PROG_NAME
from jqline.core.errors import EmptyError, ExitStatusError, Failure, InputError, MarshalError
from jqline.core.exit_codes import ExitCode
from jqline.core.values import is_truthy
from jqline.evaluator import HaltRequest, QueryRuntimeError
from jqline.rendering.json_encoder import to_compact_json

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jqline.config.logging import JqlineLogger
    from jqline.config.model import RunOptions
    from jqline.core.errors import JqlineError
    from jqline.core.values import Value
    from jqline.evaluator import Program
    from jqline.inputs.base import InputIterator
    from jqline.pipeline.console_api import ConsoleLike
    from jqline.rendering.marshalers import Marshaler

logger: JqlineLogger = get_logger(__name__)

YAML_SEPARATOR: bytes = b"---\n"


class RunPhase(str, Enum):
    """Lifecycle of a [`Runner`][jqline.pipeline.runner.Runner]."""

    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


class ExitStatus(Enum):
    """Exit-status accumulator values (``--exit-status``)."""

    OK = ExitCode.SUCCESS
    FALSY = ExitCode.FALSY
    NO_VALUE = ExitCode.NO_VALUE


@dataclass
class RunState:
    """Mutable state owned by the runner.

    Attributes:
        phase (RunPhase): Lifecycle phase.
        yaml_separator (bool): A YAML document was written, so the next needs ``---``.
        exit_status (ExitStatus | None): Accumulator; None unless ``--exit-status``.
        failures (list[Failure]): Failures reported so far, in order.
    """

    phase: RunPhase = RunPhase.IDLE
    yaml_separator: bool = False
    exit_status: ExitStatus | None = None
    failures: list[Failure] = field(default_factory=list)


@dataclass(frozen=True)
class RunOutcome:
    """Result of a run.

    Attributes:
        exit_code (int): Process exit code.
        failures (tuple[Failure, ...]): Failures that were reported during the run.
    """

    exit_code: int
    failures: tuple[Failure, ...] = ()

    @property
    def error(self) -> JqlineError | None:
        """Return the error to raise at the CLI boundary, or None on success.

        Failures were already printed, so they are summarized by an
        [`EmptyError`][jqline.core.errors.EmptyError] that prints nothing.
        """
        if self.failures:
            return EmptyError(self.exit_code)  # type: ignore[arg-type]
        if self.exit_code != ExitCode.SUCCESS:
            return ExitStatusError(self.exit_code)  # type: ignore[arg-type]
        return None


class Runner:
    """Evaluate ``program`` for every input record and write the results.

    Args:
        program (Program): Compiled query.
        marshaler (Marshaler): Encoder for result values.
        options (RunOptions): Frozen run options.
        console (ConsoleLike): Output and diagnostics sink.
        variables (Sequence[Value]): Values of the program's variables, in order.
    """

    def __init__(
        self,
        program: Program,
        marshaler: Marshaler,
        options: RunOptions,
        console: ConsoleLike,
        *,
        variables: Sequence[Value] = (),
    ) -> None:
        self.program: Program = program
        self.marshaler: Marshaler = marshaler
        self.options: RunOptions = options
        self.console: ConsoleLike = console
        self.variables: tuple[Value, ...] = tuple(variables)
        self.yaml: bool = options.output_format == OutputFormat.YAML
        self.terminator: bytes = b"" if self.yaml else options.terminator.data
        self.state: RunState = RunState()

    def run(self, inputs: InputIterator) -> RunOutcome:
        """Process every record of ``inputs``; ``inputs`` is closed on return.

        Args:
            inputs (InputIterator): The main input stream.

        Returns:
            RunOutcome: Exit code and the failures reported on the way.
        """
        self.state = RunState(
            phase=RunPhase.RUNNING,
            exit_status=ExitStatus.NO_VALUE if self.options.exit_status else None,
        )
        try:
            with closing(inputs):
                for record in inputs:
                    if isinstance(record, InputError):
                        self._fail(record.name, record.message)
                        continue
                    self._evaluate(record, inputs.current_name)
        except HaltRequest as halt:
            return self._halt(halt)
        finally:
            self.state.phase = RunPhase.DONE
        outcome = RunOutcome(self._exit_code(), tuple(self.state.failures))
        logger.debug(
            "Run finished: exit code %d, %d failure(s)", outcome.exit_code, len(outcome.failures)
        )
        return outcome

    def _evaluate(self, value: Value, source: str) -> None:
        for item in self.program.run(value, *self.variables):
            if isinstance(item, QueryRuntimeError):
                self._fail(source, f"error: {item.message}")
            else:
                self._emit(item, source)

    def _emit(self, value: Value, source: str) -> None:
        try:
            data: bytes = self.marshaler.marshal(value)
        except MarshalError as exc:
            self._fail(source, exc.message)
            return
        if self.yaml:
            if self.state.yaml_separator:
                data = YAML_SEPARATOR + data
            self.state.yaml_separator = True
        self.console.write_value(data + self.terminator)
        if self.state.exit_status is not None:
            self.state.exit_status = ExitStatus.OK if is_truthy(value) else ExitStatus.FALSY

    def _fail(self, source: str, message: str) -> None:
        logger.debug("Failure in %s: %s", source, message)
        self.state.failures.append(Failure(source, message))
        self.console.error(f"{PROG_NAME}: {message}")

    def _halt(self, halt: HaltRequest) -> RunOutcome:
        logger.debug("Halted with exit code %d", halt.exit_code)
        if halt.has_value:
            value = halt.value
            text = value if isinstance(value, str) else to_compact_json(value) + "\n"
            self.console.write_err(text)
        return RunOutcome(halt.exit_code, tuple(self.state.failures))

    def _exit_code(self) -> int:
        if self.state.failures:
            return ExitCode.DEFAULT_ERROR
        if self.state.exit_status is not None:
            return self.state.exit_status.value
        return ExitCode.SUCCESS
