# src/therasched/dataloader/postload_handler.py
from __future__ import annotations

import json
import logging
from pathlib import Path

from therasched.dataloader.types import LoadResult, ScheduleSnapshot

logger = logging.getLogger(__name__)


class LoadResultHandler:
    """
    @brief
    Hands a parsed snapshot downstream or writes a diagnostic report.

    @details
    On success the snapshot goes on to the validator. On failure every
    record-level issue is written to 'load_errors.json' in the output
    directory and None is returned, so the caller can stop without losing
    the context needed to fix the input.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def handle(self, result: LoadResult) -> ScheduleSnapshot | None:
        # (1) Success path
        if result.success and result.snapshot is not None:
            logger.info(
                "PostLoad: snapshot ready (%d session(s), %d employee(s)).",
                len(result.snapshot.sessions),
                len(result.snapshot.employees),
            )
            return result.snapshot

        # (2) Failure path: write the report
        self.output_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.output_dir / "load_errors.json"

        try:
            with out_path.open("w", encoding="utf-8") as f:
                json.dump(result.errors, f, ensure_ascii=False, indent=2)
            logger.error(
                "PostLoad: snapshot validation failed, %d issue(s). See %s",
                len(result.errors),
                out_path,
            )
        except OSError as e:
            # Report is best effort; the caller already knows the load failed
            logger.error("PostLoad: failed to write error report: %s", e)

        return None


__all__ = ["LoadResultHandler"]
