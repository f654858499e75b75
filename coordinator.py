# Author      : Tyson Limato
# Date        : 2025-7-2
# File Name   : coordinator.py
import logging
import math
import sys
from enum import Enum
from typing import Iterable, Optional

from history import RoundHistory, RoundResult
from integrator import PartitionedIntegrator
from mpiMGR import ControlBroadcaster, ReductionCombiner, WorkerGroup
from timing import RoundTimer

logger = logging.getLogger(__name__)

PROMPT = "Enter the number of intervals: (0 quits) "
TERMINATE = 0


class State(Enum):
    AWAITING_INPUT = "awaiting_input"
    BROADCASTING = "broadcasting"
    COMPUTING = "computing"
    REDUCING = "reducing"
    REPORTING = "reporting"
    TERMINATED = "terminated"


# ------------------ Console I/O (coordinator only) ------------------
class ConsoleIO:
    """
    Interactive console collaborator of the coordinator rank.

    Parameters:
    -----------
    stdin : file-like
        Stream the granularity is read from (default sys.stdin).
    stdout : file-like
        Stream prompts and results are written to (default sys.stdout).
    """

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def read_granularity(self) -> int:
        """Prompt until an integer is entered; end of input means quit."""
        while True:
            self.stdout.write(PROMPT)
            self.stdout.flush()
            line = self.stdin.readline()
            if not line:
                logger.info("End of input, terminating the group")
                return TERMINATE
            try:
                return int(line.strip())
            except ValueError:
                logger.warning("Ignoring input %r: not an integer", line.strip())

    def report(self, result: RoundResult):
        print(f"elapsed time is {result.elapsed:.4f} seconds", file=self.stdout)
        print(f"pi is approximately {result.pi:.16f}, Error is {result.error:.16f}",
              file=self.stdout)
        self.stdout.flush()


class ScriptedIO(ConsoleIO):
    """
    Batch collaborator: feeds a fixed list of granularities, then quits.

    Each granularity is issued `repeat` times in a row so that repeated
    rounds can be summarized by RoundHistory.
    """

    def __init__(self, intervals: Iterable[int], repeat: int = 1, stdout=None):
        super().__init__(stdin=None, stdout=stdout)
        self._queue = [n for n in intervals for _ in range(repeat)]

    def read_granularity(self) -> int:
        if not self._queue:
            return TERMINATE
        return self._queue.pop(0)


# ------------------ Round state machine ------------------
class CoordinatorLoop:
    """
    Drives the sequence of rounds on every rank of the group.

    The coordinator rank walks AWAITING_INPUT -> BROADCASTING -> COMPUTING ->
    REDUCING -> REPORTING and back to AWAITING_INPUT. Every other rank skips
    the I/O states and goes from REDUCING straight back to BROADCASTING to
    wait for the next value. A broadcast of 0 sends every rank to TERMINATED
    in the same round.

    Parameters:
    -----------
    group : WorkerGroup
        Identity of this worker.
    broadcaster : ControlBroadcaster
        Collective used to distribute the granularity.
    integrator : PartitionedIntegrator
        Computes this rank's partial sum.
    combiner : ReductionCombiner
        Collective used to combine partial sums on the coordinator.
    timer : RoundTimer
        Local clock for the elapsed time of a round.
    io : ConsoleIO
        Console collaborator; required on the coordinator, unused elsewhere.
    """

    def __init__(self, group: WorkerGroup, broadcaster: ControlBroadcaster,
                 integrator: PartitionedIntegrator, combiner: ReductionCombiner,
                 timer: Optional[RoundTimer] = None, io: Optional[ConsoleIO] = None):
        if group.is_coordinator and io is None:
            raise ValueError("the coordinator rank needs an I/O collaborator")
        self.group = group
        self.broadcaster = broadcaster
        self.integrator = integrator
        self.combiner = combiner
        self.timer = timer if timer is not None else RoundTimer()
        self.io = io if group.is_coordinator else None

        self.history = RoundHistory()
        self.state = State.AWAITING_INPUT if group.is_coordinator else State.BROADCASTING
        self.rounds = 0

        # Per-round values, discarded when the next round starts
        self._n = None
        self._partial = None
        self._total = None
        self._elapsed = None

        self._handlers = {
            State.AWAITING_INPUT: self._await_input,
            State.BROADCASTING: self._broadcast,
            State.COMPUTING: self._compute,
            State.REDUCING: self._reduce,
            State.REPORTING: self._report,
        }

    def run(self) -> RoundHistory:
        """Run rounds until the group terminates; return the coordinator's history."""
        while self.state is not State.TERMINATED:
            self.step()
        logger.info("Terminated after %d rounds", self.rounds)
        return self.history

    def step(self) -> State:
        """Execute the current state and move to the next one."""
        if self.state is State.TERMINATED:
            raise RuntimeError("the loop has already terminated")
        self.state = self._handlers[self.state]()
        return self.state

    def _await_input(self) -> State:
        self._n = self.io.read_granularity()
        return State.BROADCASTING

    def _broadcast(self) -> State:
        self._n = self.broadcaster.broadcast(self._n if self.group.is_coordinator else None)
        if self._n == TERMINATE:
            return State.TERMINATED
        return State.COMPUTING

    def _compute(self) -> State:
        self.timer.start()
        self._partial = self.integrator.partial_sum(self._n)
        return State.REDUCING

    def _reduce(self) -> State:
        self._total = self.combiner.reduce(self._partial)
        self._elapsed = self.timer.stop()
        self.rounds += 1
        if self.group.is_coordinator:
            return State.REPORTING
        return State.BROADCASTING

    def _report(self) -> State:
        result = RoundResult(
            intervals=self._n,
            pi=self._total,
            error=abs(self._total - math.pi),
            elapsed=self._elapsed,
        )
        logger.info("Round %d: n=%d pi=%.16f error=%.3e t=%.4fs",
                    self.rounds, result.intervals, result.pi, result.error, result.elapsed)
        self.history.append(result)
        self.io.report(result)
        return State.AWAITING_INPUT
