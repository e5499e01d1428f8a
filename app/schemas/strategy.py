"""
Coping strategy schemas.

GET  /strategies                 → StrategyListResponse
POST /strategies/{id}/usage      → StrategyUsageRequest → StrategyUsageResponse
"""
from pydantic import BaseModel, ConfigDict, Field


class StrategyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    category: str = Field(
        description="mindfulness | physical | quick | distraction | social | cognitive"
    )
    steps: list[str]
    effectiveness: int = Field(description="50–95.")
    usage_count: int
    success_count: int


class StrategyListResponse(BaseModel):
    items: list[StrategyResponse] = Field(description="Most effective first.")


class StrategyUsageRequest(BaseModel):
    succeeded: bool = Field(description="True if the craving passed without smoking.")


class StrategyUsageResponse(BaseModel):
    strategy_id: str
    timestamp: str
    succeeded: bool
