"""
Parallel fan-out of independent comparison jobs.

The engines hold no shared state, so each job runs on its own worker
thread with its own comparator.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from filecompare.core.diff.binary_diff import BinaryCompareOptions
from filecompare.core.diff.comparator import comparator_for
from filecompare.core.diff.text_diff import TextCompareOptions
from filecompare.core.models import (
    ComparisonResult,
    ContentType,
    PreconditionViolationError,
)
from filecompare.services.file_io import FileIOService


@dataclass(frozen=True)
class CompareJob:
    """One pair of files to compare; content_type None means detect it."""
    original_path: Path | str
    revised_path: Path | str
    content_type: Optional[ContentType] = None
    encoding: str = 'utf-8'


@dataclass(frozen=True)
class BatchOutcome:
    """Result or failure of a single job."""
    job: CompareJob
    result: Optional[ComparisonResult] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class BatchOptions:
    """Options for batch comparison."""
    max_workers: int = 4
    text_options: Optional[TextCompareOptions] = None
    binary_options: Optional[BinaryCompareOptions] = None


def resolve_content_type(job: CompareJob, file_io: FileIOService) -> ContentType:
    """Use the job's content type, or BINARY if either file looks binary."""
    if job.content_type is not None:
        return job.content_type
    if ContentType.BINARY in (
        file_io.detect_content_type(job.original_path),
        file_io.detect_content_type(job.revised_path),
    ):
        return ContentType.BINARY
    return ContentType.TEXT


def run_job(
    job: CompareJob,
    options: Optional[BatchOptions] = None,
    file_io: Optional[FileIOService] = None
) -> ComparisonResult:
    """Run one comparison job synchronously."""
    options = options or BatchOptions()
    file_io = file_io or FileIOService()

    file_io.require_file(job.original_path)
    file_io.require_file(job.revised_path)

    comparator = comparator_for(
        resolve_content_type(job, file_io),
        text_options=options.text_options,
        binary_options=options.binary_options,
        encoding=job.encoding,
    )
    return comparator.compare_files(job.original_path, job.revised_path)


def compare_many(
    jobs: Iterable[CompareJob],
    options: Optional[BatchOptions] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None
) -> list[BatchOutcome]:
    """
    Run comparison jobs in parallel.

    Args:
        jobs: Jobs to run
        options: Worker count and engine options
        progress_callback: Called with (jobs_done, total_jobs)

    Returns:
        One outcome per job, in submission order. A job that cannot be
        compared carries its error instead of a result; other jobs
        still run to completion.
    """
    options = options or BatchOptions()
    if options.max_workers <= 0:
        raise PreconditionViolationError(
            f"Worker count must be positive, got {options.max_workers}"
        )

    jobs = list(jobs)
    outcomes: list[Optional[BatchOutcome]] = [None] * len(jobs)
    file_io = FileIOService()
    done = 0

    with ThreadPoolExecutor(max_workers=options.max_workers) as executor:
        futures = {
            executor.submit(run_job, job, options, file_io): index
            for index, job in enumerate(jobs)
        }

        for future in as_completed(futures):
            index = futures[future]
            job = jobs[index]
            try:
                outcomes[index] = BatchOutcome(job, result=future.result())
            except Exception as e:
                logging.error(
                    f"compare_many - Failed to compare {job.original_path} and {job.revised_path}: {e}"
                )
                outcomes[index] = BatchOutcome(job, error=e)

            done += 1
            if progress_callback:
                progress_callback(done, len(jobs))

    return outcomes
