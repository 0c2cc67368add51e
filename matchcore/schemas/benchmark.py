from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class BenchmarkComparison(BaseModel):
    metric: str
    client_value: float
    benchmark_value: float
    delta: float
    interpretation: str
    basis: Literal["industry", "region", "size"]


class BenchmarkScope(BaseModel):
    role_family: Optional[str] = None
    industry: Optional[str] = None
    region: Optional[str] = None
    size_cohort: Optional[str] = None


class ClientBenchmarkingResult(BaseModel):
    opted_in: bool
    window_days: int
    scope: BenchmarkScope
    comparisons: List[BenchmarkComparison] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
