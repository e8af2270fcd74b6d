from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Row progress display with tqdm (TTY only).

The orchestrator reports a percentage; RowProgress maps it onto a bar whose
total is the sheet's row count. In non-TTY environments (CI, pipes) no bar is
created so logs stay free of control sequences, but the last percentage is
still tracked.
"""

__all__ = [
    "RowProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class RowProgress:
    """Progress bar fed by percentage updates.

    update_percent() ignores values lower than the last one seen, so the bar
    only ever moves forward.
    """

    def __init__(self, total_rows: int, *, description: str = "Ingesting rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.percent = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                leave=True,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def update_percent(self, pct: int) -> None:
        pct = max(0, min(100, int(pct)))
        if pct <= self.percent:
            return
        self.percent = pct
        if self.pbar is not None:
            target = round(self.total_rows * pct / 100)
            self.pbar.update(target - self.pbar.n)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
