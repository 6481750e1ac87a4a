from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

# -----------------------------------------------------------------------------
# Wire models. The analysis service owns these shapes; the client accepts
# camelCase or snake_case and keeps unknown fields as-is.
# -----------------------------------------------------------------------------


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @model_validator(mode="before")
    @classmethod
    def null_means_default(cls, data: Any) -> Any:
        # the service sends null for unset columns; fall back to the field default
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Risk(WireModel):
    clause: str = ""
    issue: str = ""
    suggestion: str = ""
    severity: str = "low"
    category: Optional[str] = None


class Suggestion(WireModel):
    clause: str = ""
    suggestion: str = ""
    reason: str = ""
    category: Optional[str] = None


class JurisdictionIssue(WireModel):
    clause: str = ""
    issue: str = ""
    relevant_law: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("relevant_law", "relevantLaw"),
        serialization_alias="relevant_law",
    )
    recommendation: str = ""


class AnalysisResult(WireModel):
    score: float = 0
    risk_level: str = Field(default="low", alias="riskLevel")
    risks: List[Risk] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)
    summary: str = ""
    jurisdiction_issues: Optional[List[JurisdictionIssue]] = Field(
        default=None,
        validation_alias=AliasChoices("jurisdiction_issues", "jurisdictionIssues"),
        serialization_alias="jurisdiction_issues",
    )
    clause_categories: Optional[Dict[str, List[str]]] = Field(
        default=None,
        validation_alias=AliasChoices("clause_categories", "clauseCategories"),
        serialization_alias="clause_categories",
    )


class SavedAnalysis(WireModel):
    id: Union[int, str]
    user_id: Optional[Union[int, str]] = Field(default=None, alias="userId")
    title: str = Field(
        default="",
        validation_alias=AliasChoices("title", "contractTitle"),
        serialization_alias="title",
    )
    file_name: Optional[str] = Field(default=None, alias="fileName")
    analysis_results: AnalysisResult = Field(default_factory=AnalysisResult, alias="analysisResults")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    contract_type: str = Field(default="general", alias="contractType")
    jurisdiction: str = "Canada"
    risk_level: Optional[str] = Field(default=None, alias="riskLevel")
    score: Optional[float] = None

    @property
    def effective_risk_level(self) -> str:
        return (self.risk_level or self.analysis_results.risk_level or "").lower()


class Difference(WireModel):
    section: str = ""
    first: str = ""
    second: str = ""
    impact: Optional[str] = None


class ComparisonResult(WireModel):
    summary: str = ""
    differences: List[Difference] = Field(default_factory=list)
    recommendation: str = ""


class ChatMessage(WireModel):
    id: Optional[Union[int, str]] = None
    user_id: Optional[Union[int, str]] = Field(default=None, alias="userId")
    role: str = "user"
    content: str = ""
    timestamp: Optional[datetime] = None


# -----------------------------------------------------------------------------
# Personalization records (client-side only)
# -----------------------------------------------------------------------------


class Note(BaseModel):
    id: str
    step_id: Optional[str] = None
    content: str
    created_at: datetime
    updated_at: datetime


class Reminder(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    due_date: datetime
    notify_before: int = 1  # days
    is_completed: bool = False
    step_id: Optional[str] = None


class ChecklistItem(BaseModel):
    id: str
    text: str
    is_completed: bool = False
    step_id: Optional[str] = None
    category: Optional[str] = None


# -----------------------------------------------------------------------------
# Court procedures
# -----------------------------------------------------------------------------


class StepTimeline(WireModel):
    min_days: int = Field(default=0, alias="minDays")
    max_days: int = Field(default=0, alias="maxDays")
    description: str = ""


class StepDocument(WireModel):
    name: str
    description: str = ""
    required: bool = False


class ProcedureStep(WireModel):
    id: str
    title: str
    description: str = ""
    details: str = ""
    timeline: StepTimeline = Field(default_factory=StepTimeline)
    optional: bool = False
    tips: List[str] = Field(default_factory=list)
    documents: List[StepDocument] = Field(default_factory=list)
    considerations: List[str] = Field(default_factory=list)

    @property
    def required_documents(self) -> List[StepDocument]:
        return [d for d in self.documents if d.required]


class CourtProcedure(WireModel):
    id: str
    title: str
    description: str = ""
    summary: str = ""
    jurisdiction: Optional[str] = None
    steps: List[ProcedureStep] = Field(default_factory=list)


class FlowChartNode(BaseModel):
    id: str
    label: str
    description: Optional[str] = None
    status: str = "pending"  # completed | current | pending | optional
    type: str = "process"  # start | end | decision | process | document


class FlowChartConnection(BaseModel):
    from_id: str
    to_id: str
    label: Optional[str] = None
