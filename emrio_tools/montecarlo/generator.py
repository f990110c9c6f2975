"""Monte Carlo generation of transaction matrices with reallocated Firm->Firm links."""

import logging
from dataclasses import dataclass, field

import numpy as np

from emrio_tools.errors import ConfigurationError
from emrio_tools.expansion.twofold import TwofoldSystem
from emrio_tools.montecarlo.candidates import candidate_ff_pairs
from emrio_tools.montecarlo.reallocation import reallocate_ff_block

logger = logging.getLogger(__name__)

# r_i + c_j may exceed 1 by this much before a negative-cell warning is logged
EXCESS_TOLERANCE = 1e-10


@dataclass(frozen=True)
class ScenarioMetadata:
    """Sampling information of a scenario set."""

    candidate_count: int
    drop_count: int
    rate: float
    cross_border: bool
    seed: int
    max_excess: float

    def to_dict(self) -> dict:
        return {
            "candidate_count": self.candidate_count,
            "drop_count": self.drop_count,
            "rate": self.rate,
            "cross_border": self.cross_border,
            "seed": self.seed,
            "max_excess": self.max_excess,
        }


@dataclass
class ScenarioSet:
    """
    Perturbed transaction matrices and how they were sampled.

    Attributes:
        matrices: One transaction matrix per scenario, each with its own storage
        metadata: Candidate and sampling information
        picks: Indices into the candidate list reallocated in each scenario
    """

    matrices: list[np.ndarray]
    metadata: ScenarioMetadata
    picks: list[np.ndarray] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.matrices)

    def negative_cell_counts(self) -> list[int]:
        """Number of negative cells in each scenario matrix."""
        return [int(np.count_nonzero(T < 0)) for T in self.matrices]


def max_share_excess(system: TwofoldSystem) -> float:
    """
    Largest value of r_i + c_j - 1 over all base-sector pairs, floored at 0.

    A positive value means a reallocation can drive an Other->Other cell negative.
    """
    r = np.array([system.row_share(i) for i in range(system.n_base)])
    c = np.array([system.col_share(j) for j in range(system.n_base)])
    return max(0.0, float(r.max() + c.max() - 1.0))


def generate_scenarios(
    system: TwofoldSystem,
    n_scenarios: int = 30,
    rate: float = 0.10,
    cross_border: bool = True,
    seed: int = 20251005,
) -> ScenarioSet:
    """
    Generate transaction matrices with randomly reallocated Firm->Firm links.

    In every scenario round(rate * candidates) FF pairs are drawn without
    replacement and their flows are moved to the FO and OF cells of the same 2x2
    base-sector block. All draws come from one random stream seeded once and are
    made in scenario order before any matrix is touched, so the whole set is
    reproducible from the seed.

    Args:
        system: Twofold system whose transactions are perturbed (not modified)
        n_scenarios: Number of scenarios to generate
        rate: Share of candidate FF links reallocated in each scenario, in [0, 1]
        cross_border: Only reallocate FF links between different countries
        seed: Seed of the random stream

    Returns:
        ScenarioSet with n_scenarios independent matrices and their metadata

    Raises:
        ConfigurationError: If rate is outside [0, 1] or n_scenarios < 1
        NoCandidatesError: If there is no eligible FF pair
    """
    if not 0.0 <= rate <= 1.0:
        raise ConfigurationError(f"rate must be in [0,1], got {rate}")
    if n_scenarios < 1:
        raise ConfigurationError(f"n_scenarios must be at least 1, got {n_scenarios}")

    max_excess = max_share_excess(system)
    if max_excess > EXCESS_TOLERANCE:
        logger.warning(
            f"Some (r_i + c_j) exceed 1; max excess={max_excess:.4f}. "
            "Reallocation may produce negative Other->Other cells"
        )

    candidates = candidate_ff_pairs(system, cross_border=cross_border)
    candidate_count = len(candidates)
    drop_count = round(rate * candidate_count)
    logger.info(
        f"Reallocating {drop_count} of {candidate_count} FF links in each of {n_scenarios} scenarios"
    )

    rng = np.random.default_rng(seed)
    picks = [
        rng.choice(candidate_count, size=drop_count, replace=False) for _ in range(n_scenarios)
    ]

    matrices = []
    for run, pick in enumerate(picks):
        T_new = system.T.copy()
        for s in pick:
            p, q = candidates[s]
            reallocate_ff_block(T_new, system.base_index(p), system.base_index(q))
        logger.debug(f"Scenario {run}: reallocated candidates {pick.tolist()}")
        matrices.append(T_new)

    metadata = ScenarioMetadata(
        candidate_count=candidate_count,
        drop_count=drop_count,
        rate=rate,
        cross_border=cross_border,
        seed=seed,
        max_excess=max_excess,
    )
    return ScenarioSet(matrices=matrices, metadata=metadata, picks=picks)
