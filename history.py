# Author      : Tyson Limato
# Date        : 2025-7-2
# File Name   : history.py
from dataclasses import asdict, dataclass

import matplotlib.pyplot as plt
import pandas as pd

COLUMNS = ["intervals", "pi", "error", "elapsed"]


@dataclass(frozen=True)
class RoundResult:
    """Outcome of one completed round, as seen by the coordinator."""
    intervals: int
    pi: float
    error: float
    elapsed: float


class RoundHistory:
    """
    Every round completed during one run, kept in memory on the coordinator.

    Methods:
    --------
    append(result)          -- Record a finished round.
    to_frame()              -- All rounds as a pandas DataFrame.
    summary()               -- Per-granularity statistics of time and error.
    save_csv(path)          -- Write the rounds to a CSV file.
    plot(filename)          -- Plot error and elapsed time against granularity.
    """

    def __init__(self):
        self.results = []

    def __len__(self):
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def __getitem__(self, idx):
        return self.results[idx]

    def append(self, result: RoundResult):
        self.results.append(result)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(r) for r in self.results], columns=COLUMNS)

    def summary(self) -> pd.DataFrame:
        """
        Aggregate repeated rounds of the same granularity.

        Returns:
        --------
        pd.DataFrame
            Indexed by `intervals`, with the round count, mean/min/std of the
            elapsed time and the mean absolute error.
        """
        df = self.to_frame()
        grouped = df.groupby("intervals")
        return pd.DataFrame({
            "rounds": grouped["elapsed"].count(),
            "elapsed_mean": grouped["elapsed"].mean(),
            "elapsed_min": grouped["elapsed"].min(),
            "elapsed_std": grouped["elapsed"].std(ddof=0),
            "error_mean": grouped["error"].mean(),
        })

    def save_csv(self, path: str):
        self.to_frame().to_csv(path, index=False)

    def plot(self, filename: str = 'pi_rounds.png'):
        """
        Uses matplotlib to plot the mean error (log scale) and the mean elapsed
        time of each granularity, and saves the figure to `filename`.
        """
        stats = self.summary()
        intervals = stats.index.tolist()
        fig, ax1 = plt.subplots(figsize=(8, 5))

        # Error on left axis
        ax1.plot(intervals, stats["error_mean"],
                 label='Error', linestyle='-', marker='o')
        ax1.set_xlabel('Intervals')
        ax1.set_ylabel('Absolute error')
        ax1.set_xscale('log')
        ax1.set_yscale('log')

        # Time on right axis
        ax2 = ax1.twinx()
        ax2.plot(intervals, stats["elapsed_mean"],
                 label='Time (s)', linestyle='--', marker='x')
        ax2.set_ylabel('Elapsed Time (s)')

        # Combine legends
        lines1, labels1 = ax1.get_legend_handles_labels()
        lines2, labels2 = ax2.get_legend_handles_labels()
        ax1.legend(lines1 + lines2, labels1 + labels2, loc='upper right',
                   fontsize='small')

        plt.title('Pi Error & Time per Granularity')
        fig.tight_layout()
        fig.savefig(filename)
        plt.close(fig)
