"""Repository contributor model."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Contributor(BaseModel):
    """A repository contributor, keyed by ``login``."""

    model_config = ConfigDict(frozen=True)

    login: str = Field(..., description="Account login (identity key)")
    name: str = Field(..., description="Display name, falls back to login")
    avatar_url: Optional[str] = Field(None, description="Avatar URL")
    contributions: int = Field(0, ge=0, description="Number of contributions")
    type: str = Field("User", description="Account type reported by the host")
