# survey_api/schemas/analytics.py
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # El dashboard consume camelCase (totalResponses, avgRating, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DepartmentCount(CamelModel):
    name: Optional[str] = None
    count: int


STAT_FIELDS = ("avg_rating", "distribution", "yes_count", "no_count")


class QuestionAnalytics(CamelModel):
    question_id: UUID
    question: str
    type: str
    response_count: int
    avg_rating: Optional[float] = None
    distribution: Optional[List[int]] = None  # buckets 1..5
    yes_count: Optional[int] = None
    no_count: Optional[int] = None

    @model_serializer(mode="wrap")
    def _drop_missing_stats(self, handler: SerializerFunctionWrapHandler):
        # sin datos del tipo no se envían avgRating/distribution ni conteos sí/no
        data = handler(self)
        for field in STAT_FIELDS:
            for key in (field, to_camel(field)):
                if data.get(key, 0) is None:
                    del data[key]
        return data


class SurveyAnalytics(CamelModel):
    survey_id: UUID
    total_responses: int
    average_completion_time: Optional[float] = None
    department_breakdown: List[DepartmentCount] = Field(default_factory=list)
    question_analytics: List[QuestionAnalytics] = Field(default_factory=list)
    generated_at: datetime


class SectionAnalytics(CamelModel):
    section_id: UUID
    section_title: str
    section_order: int
    rating_average: Optional[float] = None
    rating_count: int = 0
    rating_variance: Optional[float] = None
    rating_std_deviation: Optional[float] = None
    other_question_counts: Dict[str, int] = Field(default_factory=dict)
    total_questions: int = 0
    total_responses: int = 0


class SectionAnalyticsOut(CamelModel):
    survey_id: UUID
    sections: List[SectionAnalytics] = Field(default_factory=list)
    generated_at: datetime


class AuditAnalytics(CamelModel):
    survey_id: UUID
    total_responses: int
    question_analytics: List[QuestionAnalytics] = Field(default_factory=list)
    generated_at: datetime
