"""Pydantic models for the robustness analysis configuration."""

from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path

import yaml
from pydantic import (
    BaseModel,
    Field,
    PositiveInt,
    RootModel,
    field_validator,
    model_validator,
)

from emrio_tools.errors import ConfigurationError

# Firm shares used for the illustrative table. All shares are at most 0.45, so
# r_i + c_j <= 0.90 for every pair of base sectors.
DEFAULT_SECTOR_FIRM_SHARES = {
    "Primary": 0.45,
    "Secondary": 0.35,
    "Tertiary": 0.40,
}


class NegativeCellPolicy(str, Enum):
    """What to do with a scenario transaction matrix that has negative cells."""

    ACCEPT = "accept"
    WARN = "warn"
    REJECT = "reject"


class FirmShares(RootModel[dict[str, dict[str, float]]]):
    """Firm-side shares per base sector, keyed country -> sector -> share.

    Example YAML:
        A:
            Primary: 0.45
            Secondary: 0.35
        B:
            Primary: 0.45
            Secondary: 0.35
    """

    @field_validator("root")
    @classmethod
    def validate_shares(cls, shares: dict[str, dict[str, float]]) -> dict[str, dict[str, float]]:
        """Validate that every share lies in [0, 1]."""
        for country, sector_shares in shares.items():
            for sector, share in sector_shares.items():
                if not 0 <= share <= 1:
                    raise ValueError(
                        f"Firm share for ({country}, {sector}) must be between 0 and 1, got {share}"
                    )
        return shares

    @classmethod
    def from_pairs(cls, shares: Mapping[tuple[str, str], float]) -> "FirmShares":
        """Build shares from a mapping keyed by (country, sector) tuples."""
        nested: dict[str, dict[str, float]] = {}
        for (country, sector), share in shares.items():
            nested.setdefault(country, {})[sector] = float(share)
        return cls(nested)

    def get_share(self, sector_id: tuple[str, str]) -> float:
        """Get the share of a (country, sector) pair.

        Raises:
            ConfigurationError: If no share is defined for the pair
        """
        country, sector = sector_id
        try:
            return self.root[country][sector]
        except KeyError:
            raise ConfigurationError(f"Missing firm share for ({country}, {sector})") from None

    def as_dict(self) -> dict[tuple[str, str], float]:
        """Flatten to a mapping keyed by (country, sector) tuples."""
        return {
            (country, sector): share
            for country, sector_shares in self.root.items()
            for sector, share in sector_shares.items()
        }


class MonteCarloConfig(BaseModel):
    """Parameters of the Firm->Firm reallocation experiment."""

    n_scenarios: PositiveInt = Field(30, description="Number of Monte Carlo scenarios")
    rate: float = Field(
        0.10, ge=0.0, le=1.0, description="Share of candidate FF links reallocated per scenario"
    )
    cross_border: bool = Field(True, description="Only reallocate cross-border FF links")
    seed: int = Field(20251005, description="Seed of the single random stream")


class SummaryConfig(BaseModel):
    """Parameters of the uncertainty summary."""

    probs: tuple[float, float, float] = Field(
        (0.025, 0.5, 0.975), description="Lower, central and upper quantile probabilities"
    )
    negative_cells: NegativeCellPolicy = NegativeCellPolicy.ACCEPT
    max_workers: PositiveInt | None = Field(
        None, description="Worker threads for scenario decomposition (None runs sequentially)"
    )

    @field_validator("probs")
    @classmethod
    def validate_probs(cls, probs: tuple[float, float, float]) -> tuple[float, float, float]:
        """Validate that the quantile probabilities are increasing and within [0, 1]."""
        lo, mid, hi = probs
        if not 0 <= lo < mid < hi <= 1:
            raise ValueError(f"Quantile probabilities must satisfy 0 <= lo < mid < hi <= 1, got {probs}")
        return probs


class AnalysisConfig(BaseModel):
    """Complete configuration of a robustness analysis run."""

    row_shares: FirmShares
    col_shares: FirmShares | None = None
    monte_carlo: MonteCarloConfig = Field(default_factory=MonteCarloConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)

    @model_validator(mode="after")
    def validate_share_coverage(self) -> "AnalysisConfig":
        """Validate that row and column shares cover the same base sectors."""
        if self.col_shares is None:
            return self

        row_pairs = set(self.row_shares.as_dict())
        col_pairs = set(self.col_shares.as_dict())
        if row_pairs != col_pairs:
            raise ValueError(
                f"Row and column shares cover different sectors: "
                f"only in rows {sorted(row_pairs - col_pairs)}, "
                f"only in columns {sorted(col_pairs - row_pairs)}"
            )
        return self

    @property
    def effective_col_shares(self) -> FirmShares:
        """Column shares, falling back to the row shares."""
        return self.col_shares if self.col_shares is not None else self.row_shares

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AnalysisConfig":
        """Load and validate a configuration from a YAML file."""
        with open(path) as f:
            config_dict = yaml.safe_load(f)
        return cls.model_validate(config_dict)


def default_firm_shares(
    countries: Iterable[str] = ("A", "B"),
    sectors: Iterable[str] = ("Primary", "Secondary", "Tertiary"),
) -> FirmShares:
    """Get the illustrative firm shares for every (country, sector) pair.

    Args:
        countries: Country codes to cover
        sectors: Sector names, each must have a default share

    Returns:
        FirmShares with the same share for a sector in every country

    Raises:
        ConfigurationError: If a sector has no default share
    """
    sectors = list(sectors)
    unknown = [s for s in sectors if s not in DEFAULT_SECTOR_FIRM_SHARES]
    if unknown:
        raise ConfigurationError(f"No default firm share for sectors: {unknown}")
    return FirmShares(
        {country: {s: DEFAULT_SECTOR_FIRM_SHARES[s] for s in sectors} for country in countries}
    )
