# Author      : Tyson Limato
# Date        : 2025-7-2
# File Name   : config.py
import argparse
from dataclasses import dataclass
from typing import List, Optional

from integrator import DEFAULT_CHUNK_SIZE

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass
class RunConfig:
    """
    Settings of one parallel pi run, identical on every rank.

    Without `intervals` the coordinator reads granularities from the console.
    """

    # Batch mode: granularities to run, each `repeat` times, then quit
    intervals: Optional[List[int]] = None
    repeat: int = 1

    # Group
    root: int = 0
    chunk_size: int = DEFAULT_CHUNK_SIZE

    # Logging
    log_level: str = "WARNING"

    # Outputs written by the coordinator at shutdown
    history_csv: Optional[str] = None
    plot: Optional[str] = None

    def __post_init__(self):
        if self.repeat < 1:
            raise ValueError(f"repeat must be >= 1, got {self.repeat}")
        if self.root < 0:
            raise ValueError(f"root must be >= 0, got {self.root}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level}")

    @property
    def interactive(self) -> bool:
        return self.intervals is None

    @classmethod
    def from_args(cls, argv=None) -> 'RunConfig':
        parser = build_parser()
        args = parser.parse_args(argv)
        try:
            return cls(
                intervals=args.intervals,
                repeat=args.repeat,
                root=args.root,
                chunk_size=args.chunk_size,
                log_level=args.log_level,
                history_csv=args.history_csv,
                plot=args.plot,
            )
        except ValueError as exc:
            parser.error(str(exc))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Estimate pi with the midpoint rule across MPI ranks "
                    "(launch with: mpiexec -n <N> python main.py)")
    parser.add_argument('--intervals', '-n', type=int, nargs='+', metavar='N',
                        help="run these granularities and quit instead of prompting")
    parser.add_argument('--repeat', '-r', type=int, default=1,
                        help="rounds per granularity in batch mode")
    parser.add_argument('--root', type=int, default=0,
                        help="rank of the coordinator")
    parser.add_argument('--chunk-size', type=int, default=DEFAULT_CHUNK_SIZE,
                        help="sample points evaluated per numpy block")
    parser.add_argument('--log-level', type=str.upper, default="WARNING",
                        choices=LOG_LEVELS)
    parser.add_argument('--history-csv', type=str, default=None,
                        help="write every round to this CSV file")
    parser.add_argument('--plot', type=str, default=None,
                        help="save an error/time plot to this image file")
    return parser
