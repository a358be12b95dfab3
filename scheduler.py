"""
Bounded fetch scheduler: runs many detail-page jobs with at most
``max_workers`` in flight and fails the whole batch on the first error.
"""

import concurrent.futures
import logging
from typing import Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


def run_bounded(jobs: Sequence[Callable[[], T]],
                max_workers: int = 4,
                progress_every: int = 25) -> List[T]:
    """Run every job with a fixed concurrency ceiling and wait for all of them.

    Results come back in job order regardless of completion order. If any job
    raises, queued jobs are cancelled and the exception propagates.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    results: List[Optional[T]] = [None] * len(jobs)
    if not jobs:
        return []

    executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)
    try:
        future_to_idx = {executor.submit(job): idx for idx, job in enumerate(jobs)}

        completed = 0
        for future in concurrent.futures.as_completed(future_to_idx):
            idx = future_to_idx[future]
            # re-raises the job's exception
            results[idx] = future.result()

            completed += 1
            if progress_every and completed % progress_every == 0:
                logger.info(f"🔍 Detail progress: {completed}/{len(jobs)}")
    except BaseException:
        executor.shutdown(wait=True, cancel_futures=True)
        raise
    else:
        executor.shutdown(wait=True)

    return results
