"""
scoring/distributor.py

Decides which assessor reviews which application.

Strategies:
    round_robin   application i takes pool[(i + j) mod n] for j in [0, target)
    random        min(target, n) distinct assessors drawn without replacement
    balanced      repeatedly take the least-loaded assessors, ties by pool order

No application receives more than min(target, n) distinct assessors, and a
pair is never produced twice. Pairs already present (``existing``) count
toward an application's target and, for balanced, toward assessor load.
Pairs with a declared conflict of interest are never produced.

The distributor only plans; the caller persists the pairs and the store
enforces (application, assessor) uniqueness.
"""

import logging
import random
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from grant_review.models.enumerations import DistributionStrategy

logger = logging.getLogger(__name__)

Pair = Tuple[str, str]  # (application_id, assessor_id)


@dataclass(frozen=True)
class AssignmentPair:
    application_id: str
    assessor_id: str


@dataclass
class DistributionPlan:
    """Output of AssignmentDistributor.distribute()."""
    strategy: DistributionStrategy
    target: int
    pairs: List[AssignmentPair] = field(default_factory=list)
    skipped_applications: List[str] = field(default_factory=list)

    def load(self) -> Counter:
        """New pairs per assessor in this plan."""
        return Counter(p.assessor_id for p in self.pairs)


class AssignmentDistributor:
    """Plan assessor/application pairings for one distribution run."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def distribute(
        self,
        application_ids: Sequence[str],
        assessor_ids: Sequence[str],
        strategy: DistributionStrategy = DistributionStrategy.ROUND_ROBIN,
        assessors_per_application: int = 2,
        existing: Iterable[Pair] = (),
        conflicts: Iterable[Pair] = (),
    ) -> DistributionPlan:
        """
        Args:
            application_ids: Submitted applications to cover.
            assessor_ids: The call's active assessor pool, in pool order.
            strategy: round_robin, random or balanced.
            assessors_per_application: Target distinct assessors per application.
            existing: (application_id, assessor_id) pairs already assigned.
            conflicts: (application_id, assessor_id) pairs that must not be assigned.

        Returns:
            DistributionPlan with the new pairs in creation order.
        """
        strategy = DistributionStrategy(strategy)
        if assessors_per_application < 1:
            raise ValueError(
                f"assessors_per_application must be >= 1, got {assessors_per_application}"
            )

        applications = list(dict.fromkeys(application_ids))
        pool = list(dict.fromkeys(assessor_ids))
        plan = DistributionPlan(strategy=strategy, target=assessors_per_application)

        if not pool:
            logger.warning(
                "distribution_empty_pool",
                extra={"applications": len(applications), "strategy": strategy.value},
            )
            return plan

        per_app_limit = min(assessors_per_application, len(pool))
        pool_index = {a: i for i, a in enumerate(pool)}
        blocked: Set[Pair] = set(conflicts)

        assigned: Dict[str, Set[str]] = defaultdict(set)
        load: Counter = Counter({a: 0 for a in pool})
        for application_id, assessor_id in existing:
            assigned[application_id].add(assessor_id)
            if assessor_id in load:
                load[assessor_id] += 1

        for i, application_id in enumerate(applications):
            remaining = per_app_limit - len(assigned[application_id])
            if remaining <= 0:
                plan.skipped_applications.append(application_id)
                continue

            eligible = [
                a for a in pool
                if a not in assigned[application_id] and (application_id, a) not in blocked
            ]

            if strategy == DistributionStrategy.ROUND_ROBIN:
                chosen = self._round_robin(i, pool, eligible, remaining)
            elif strategy == DistributionStrategy.RANDOM:
                chosen = self.rng.sample(eligible, min(remaining, len(eligible)))
            else:
                chosen = sorted(eligible, key=lambda a: (load[a], pool_index[a]))[:remaining]

            for assessor_id in chosen:
                plan.pairs.append(AssignmentPair(application_id, assessor_id))
                assigned[application_id].add(assessor_id)
                load[assessor_id] += 1

            if len(chosen) < remaining:
                logger.warning(
                    "distribution_short",
                    extra={
                        "application_id": application_id,
                        "wanted": remaining,
                        "assigned": len(chosen),
                    },
                )

        logger.info(
            "distribution_planned",
            extra={
                "strategy": strategy.value,
                "target": assessors_per_application,
                "applications": len(applications),
                "pool_size": len(pool),
                "pairs": len(plan.pairs),
                "skipped": len(plan.skipped_applications),
            },
        )
        return plan

    @staticmethod
    def _round_robin(
        index: int,
        pool: Sequence[str],
        eligible: Sequence[str],
        remaining: int,
    ) -> List[str]:
        eligible_set = set(eligible)
        rotated = [pool[(index + j) % len(pool)] for j in range(len(pool))]
        return [a for a in rotated if a in eligible_set][:remaining]
