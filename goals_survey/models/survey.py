from __future__ import annotations

from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Platform(str, Enum):
    """Presentation flavours offered on the first screen."""

    WEB = "web"
    WHATSAPP = "whatsapp"
    TELEGRAM = "telegram"


class AppState(str, Enum):
    """Every view the survey app can be showing."""

    LOADING = "loading"
    WELCOME_BACK = "welcome-back"
    PLATFORM_SELECT = "platform-select"
    LANGUAGE_SELECT = "language-select"
    SURVEY_RUNNING = "survey-running"
    SURVEY_COMPLETE = "survey-complete"
    REPORT_GENERATING = "report-generating"
    REPORT_VIEW = "report-view"


class ChatMessage(BaseModel):
    """A single chat bubble."""

    sender: Literal["bot", "user"]
    text: str
    is_error: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class SurveyResponse(BaseModel):
    """A user answer paired with the bot question it replied to."""

    question: str
    answer: str

    model_config = ConfigDict(extra="forbid")


class AnalysisItem(BaseModel):
    question: str
    answer: str
    insight: str

    model_config = ConfigDict(extra="forbid")


class ChartData(BaseModel):
    """Numeric data the model extracted from the answers, if any."""

    title: str = ""
    labels: List[str] = Field(default_factory=list)
    values: List[float] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("labels", mode="before")
    @classmethod
    def _stringify_labels(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            return [str(label) for label in value]
        return value


class ReportData(BaseModel):
    """The structured report produced once the survey is complete."""

    title: str
    summary: str
    detailed_analysis: List[AnalysisItem] = Field(alias="detailedAnalysis")
    conclusion: str
    chart_data: ChartData = Field(alias="chartData")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @property
    def has_chart(self) -> bool:
        """Return True when there is at least one labelled value to plot."""

        return bool(self.chart_data.labels) and bool(self.chart_data.values)


class SavedSnapshot(BaseModel):
    """The last completed report together with the answers it was built from."""

    report: ReportData
    responses: List[SurveyResponse] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
