"""Batch analysis of many profiles."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from ..config.settings import settings
from ..core.errors import FertilityEngineError
from ..core.models import ClinicalProfile
from ..utils.logging import get_logger
from .engine import FertilityEngine
from .models import BatchItem

logger = get_logger(__name__)


class BatchAnalyzer:
    """
    Analyze many independent profiles concurrently.

    Invocations share no state, so profiles are fanned out to worker
    threads (or tasks) without coordination. A profile that fails
    validation is reported in its own :class:`BatchItem` and does not
    stop the rest of the batch.

    Example:
        >>> batch = BatchAnalyzer(max_workers=8)
        >>> items = batch.analyze_many([ClinicalProfile(age=31), ClinicalProfile(age=10)])
        >>> [item.ok for item in items]
        [True, False]
    """

    def __init__(
        self,
        engine: Optional[FertilityEngine] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize batch analyzer.

        Args:
            engine: Engine to run each analysis (default: a new FertilityEngine)
            max_workers: Concurrent workers (default: settings.batch_max_workers)
        """
        self.engine = engine or FertilityEngine()
        self.max_workers = max_workers or settings.batch_max_workers

    def _run_one(self, index: int, profile: ClinicalProfile) -> BatchItem:
        try:
            return BatchItem(index=index, result=self.engine.analyze(profile))
        except FertilityEngineError as e:
            logger.error(f"Profile {index} failed: {e}")
            return BatchItem(index=index, error=str(e), error_type=type(e).__name__)

    def analyze_many(self, profiles: Sequence[ClinicalProfile]) -> List[BatchItem]:
        """
        Analyze profiles on a thread pool.

        Args:
            profiles: Profiles to analyze

        Returns:
            One BatchItem per profile, in input order
        """
        logger.info(f"Batch analysis: {len(profiles)} profiles, {self.max_workers} workers")
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            items = list(pool.map(self._run_one, range(len(profiles)), profiles))
        failed = sum(1 for item in items if not item.ok)
        logger.info(f"Batch complete: {len(items) - failed} succeeded, {failed} failed")
        return items

    async def analyze_many_async(self, profiles: Sequence[ClinicalProfile]) -> List[BatchItem]:
        """
        Analyze profiles as asyncio tasks, at most ``max_workers`` at a time.

        Args:
            profiles: Profiles to analyze

        Returns:
            One BatchItem per profile, in input order
        """
        semaphore = asyncio.Semaphore(self.max_workers)

        async def run(index: int, profile: ClinicalProfile) -> BatchItem:
            async with semaphore:
                return await asyncio.to_thread(self._run_one, index, profile)

        return list(await asyncio.gather(*(run(i, p) for i, p in enumerate(profiles))))
