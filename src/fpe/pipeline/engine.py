"""End-to-end fertility analysis pipeline.

``FertilityEngine.analyze`` runs every stage in order:

1. validate the profile (range errors abort, consistency issues become warnings)
2. aggregate per-axis multipliers and check them against their bounds
3. detect nonlinear interactions
4. synthesize the bounded monthly probability
5. classify category, treatment tier, urgency and time to pregnancy
   and assess each assisted-reproduction technique
6. generate ranked recommendations and, optionally, benchmark context

Each call is independent and side-effect free apart from logging; the
engine holds no per-analysis state, so one instance can serve many
threads or tasks at once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..benchmarks.lookup import benchmarks_for, check_plausibility
from ..classification import classifier
from ..classification.recommendations import generate_recommendations
from ..classification.techniques import plan_assisted_reproduction
from ..config.settings import Settings, settings as default_settings
from ..core.models import ClinicalProfile
from ..factors.aggregator import aggregate
from ..interactions.engine import build_interactions_report, detect_interactions
from ..synthesis.synthesizer import synthesize
from ..utils.logging import get_logger
from ..validation.validator import ProfileValidator, validate_calculation_safety
from .models import ComprehensiveFertilityResult


class FertilityEngine:
    """Compute a :class:`ComprehensiveFertilityResult` from a clinical profile."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or default_settings
        self.logger = logger or get_logger(
            __name__,
            level=self.settings.log_level,
            log_format=self.settings.log_format,
        )

    def analyze(self, profile: ClinicalProfile) -> ComprehensiveFertilityResult:
        validated = ProfileValidator().validate(profile)
        profile = validated.profile
        warnings = list(validated.warnings)

        factors = aggregate(profile)
        validate_calculation_safety(factors)

        records = detect_interactions(profile)
        report = build_interactions_report(records)

        monthly, confidence = synthesize(factors, records, validated.availability.confidence)

        category = classifier.categorize(monthly)
        complexity = classifier.treatment_complexity(monthly, profile, report)
        urgency = classifier.urgency(monthly, profile, report, complexity)
        techniques = plan_assisted_reproduction(profile)
        recommendations = generate_recommendations(
            profile, factors, report, complexity, limit=self.settings.max_recommendations, plan=techniques
        )

        benchmarks = None
        if self.settings.include_benchmarks:
            benchmarks = benchmarks_for(profile)
            deviation = check_plausibility(monthly, profile.age, self.settings.benchmark_tolerance)
            if deviation is not None:
                self.logger.warning(deviation.message)
                warnings.append(deviation)

        result = ComprehensiveFertilityResult(
            monthly_probability=monthly,
            category=category,
            treatment_complexity=complexity,
            treatment_path=classifier.treatment_path(complexity),
            urgency=urgency,
            key_factors=factors.altered(),
            recommendations=recommendations,
            confidence=confidence,
            availability=validated.availability,
            interactions=report,
            warnings=warnings,
            time_to_pregnancy=classifier.estimate_time_to_pregnancy(monthly, complexity),
            evidence_sources=classifier.evidence_sources(recommendations, report),
            benchmarks=benchmarks,
            techniques=techniques,
        )
        self.logger.info(
            "Fertility analysis complete",
            extra={
                "extra": {
                    "monthly": round(monthly, 4),
                    "category": category.value,
                    "complexity": complexity.value,
                    "interactions": report.names(),
                    "confidence": confidence,
                    "first_line_technique": techniques.first_line,
                }
            },
        )
        return result

    async def analyze_async(self, profile: ClinicalProfile) -> ComprehensiveFertilityResult:
        """Run :meth:`analyze` on a worker thread so callers' event loops stay responsive."""
        return await asyncio.to_thread(self.analyze, profile)


def analyze_fertility(
    profile: ClinicalProfile,
    logger: Optional[logging.Logger] = None,
) -> ComprehensiveFertilityResult:
    """Analyze ``profile`` with a default-configured engine."""
    return FertilityEngine(logger=logger).analyze(profile)
