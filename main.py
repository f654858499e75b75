# ------------------------------------------------------------
# Author      : Tyson Limato
# Date        : 2025-7-2
# File Name   : main.py
# Description : Estimates pi by integrating 4/(1+x^2) over [0, 1] with the
#               midpoint rule. Every MPI rank owns a strided slice of the
#               sample points, the coordinator broadcasts the number of
#               intervals each round and collects the partial sums with a
#               reduce.
#
# Usage       : mpiexec -n 4 python main.py
#               mpiexec -n 4 python main.py -n 1000 100000 -r 5 --plot pi.png
#
# Dependencies:
#       - mpi4py
#       - numpy
#       - pandas
#       - matplotlib
# ------------------------------------------------------------
import logging

from config import RunConfig
from coordinator import ConsoleIO, CoordinatorLoop, ScriptedIO
from errors import PiRunError
from integrator import PartitionedIntegrator
from mpiMGR import MPIManager
from timing import RoundTimer

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - rank %(rank)s - %(name)s - %(levelname)s - %(message)s'


class RankFilter(logging.Filter):
    """Stamps every log record with the MPI rank that emitted it."""

    def __init__(self, rank):
        super().__init__()
        self.rank = rank

    def filter(self, record):
        record.rank = self.rank
        return True


def configure_logging(level: str, rank="-"):
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    for handler in logging.getLogger().handlers:
        handler.addFilter(RankFilter(rank))


def build_loop(config: RunConfig, manager: MPIManager, io=None) -> CoordinatorLoop:
    """Wire the components of one rank together."""
    group = manager.group
    if group.is_coordinator and io is None:
        io = ConsoleIO() if config.interactive else ScriptedIO(config.intervals, config.repeat)
    return CoordinatorLoop(
        group=group,
        broadcaster=manager.broadcaster(),
        integrator=PartitionedIntegrator(group, chunk_size=config.chunk_size),
        combiner=manager.combiner(),
        timer=RoundTimer(),
        io=io,
    )


def write_outputs(config: RunConfig, history):
    if len(history) == 0:
        return
    logger.info("Round summary:\n%s", history.summary().to_string())
    if config.history_csv:
        history.save_csv(config.history_csv)
        logger.info("Wrote %d rounds to %s", len(history), config.history_csv)
    if config.plot:
        history.plot(config.plot)
        logger.info("Saved plot to %s", config.plot)


def main(argv=None, io=None) -> int:
    config = RunConfig.from_args(argv)
    configure_logging(config.log_level)

    # A group that cannot agree on its size never runs a round
    manager = MPIManager(root=config.root)
    configure_logging(config.log_level, manager.rank)
    logger.info("Worker group ready: %d ranks, coordinator %d", manager.size, config.root)

    try:
        loop = build_loop(config, manager, io=io)
        history = loop.run()
        if manager.group.is_coordinator:
            write_outputs(config, history)
    except PiRunError:
        logger.exception("Fatal error, aborting the group")
        manager.abort(1)
        return 1

    manager.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
