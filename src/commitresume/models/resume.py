"""Resume bullet point models."""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Category(str, Enum):
    """Taxonomy buckets for bullet points."""

    DEVELOPMENT = "Development & Implementation"
    PERFORMANCE = "Performance & Optimization"
    PROBLEM_SOLVING = "Problem Solving & Maintenance"
    INTEGRATION = "Integration & Deployment"
    QUALITY = "Quality Assurance & Testing"
    GENERAL = "General Development"


class BulletPoint(BaseModel):
    """A single generated resume bullet point."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str = Field(..., description="Resume bullet point text")
    action_verb: str = Field(..., alias="actionVerb", description="Leading action verb")
    business_impact: str = Field(..., alias="businessImpact", description="Business value description")
    confidence: float = Field(0.0, ge=0.0, le=1.0, description="Model confidence")


class BulletGroup(BaseModel):
    """Bullet points sharing a category."""

    model_config = ConfigDict(populate_by_name=True)

    category: Category
    bullet_points: List[BulletPoint] = Field(default_factory=list, alias="bulletPoints")
    count: int = 0

    @model_validator(mode="after")
    def _sync_count(self) -> "BulletGroup":
        if self.count != len(self.bullet_points):
            raise ValueError("count must equal the number of bullet points")
        return self
