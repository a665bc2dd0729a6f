from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from typing import List, Literal, Optional


class AnalysisRequest(BaseModel):
    resumeText: str
    targetRole: str


# Analysis models use strict types: the parsed reply is returned as-is,
# so anything pydantic would coerce ("82" -> 82) must fail validation instead.

class SkillGap(BaseModel):
    model_config = ConfigDict(extra="allow")

    skill: StrictStr
    importance: Literal["critical", "important", "nice-to-have"]
    description: StrictStr


class Strength(BaseModel):
    model_config = ConfigDict(extra="allow")

    skill: StrictStr
    relevance: StrictStr


class Course(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: StrictStr
    platform: StrictStr
    skill: StrictStr
    estimatedDuration: StrictStr
    priority: Literal["high", "medium", "low"]


class ActionStep(BaseModel):
    model_config = ConfigDict(extra="allow")

    step: StrictInt
    action: StrictStr
    timeframe: StrictStr


class AnalysisResult(BaseModel):
    """Shape the analyst prompt asks the model to return."""
    model_config = ConfigDict(extra="allow")

    summary: StrictStr
    matchScore: StrictInt = Field(ge=0, le=100)
    skillGaps: List[SkillGap]
    existingStrengths: List[Strength]
    recommendedCourses: List[Course]
    actionPlan: List[ActionStep]


class AnalysisResponse(BaseModel):
    analysis: AnalysisResult


class ErrorResponse(BaseModel):
    error: str
    rawAnalysis: Optional[str] = None


class Role(BaseModel):
    id: str
    name: str
