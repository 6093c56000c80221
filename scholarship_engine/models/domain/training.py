"""Historical decisions and the labeled samples derived from them."""

from dataclasses import dataclass
from typing import Annotated, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from scholarship_engine.core.enums import DecisionStatus
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import EligibilityCriteria

# Statuses that carry a training label
LABELED_STATUSES = {DecisionStatus.APPROVED: 1, DecisionStatus.REJECTED: 0}


class HistoricalDecision(BaseModel):
    """
    A past application outcome supplied by the record store.

    Attributes:
        offering_id: Offering the application was made to
        profile: Applicant snapshot at application time
        criteria: Offering criteria at application time
        status: Workflow status; known statuses parse to DecisionStatus,
            anything else is kept as the raw string
    """

    model_config = ConfigDict(frozen=True)

    offering_id: str
    profile: ApplicantProfile
    criteria: EligibilityCriteria
    status: Annotated[Union[DecisionStatus, str], Field(union_mode="left_to_right")]

    @property
    def label(self) -> Optional[int]:
        """1 for approved, 0 for rejected, None for every other status."""
        return LABELED_STATUSES.get(self.status)


@dataclass(frozen=True)
class TrainingSample:
    """
    One labeled feature vector.

    Attributes:
        features: Feature values in FEATURE_NAMES order
        label: 1 for approved, 0 for rejected
        offering_id: Offering the sample came from (None for synthetic samples)
    """

    features: tuple[float, ...]
    label: int
    offering_id: Optional[str] = None

    def __post_init__(self):
        if self.label not in (0, 1):
            raise ValueError(f"Training label must be 0 or 1, got {self.label!r}")
        if not isinstance(self.features, tuple):
            object.__setattr__(self, "features", tuple(float(f) for f in self.features))
