# survey_api/api/v1/endpoints/admin_analytics.py
import io
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from survey_api.api.deps.auth import require_admin
from survey_api.api.deps.tenant import survey_in_scope
from survey_api.schemas.analytics import AuditAnalytics, SectionAnalyticsOut, SurveyAnalytics
from survey_api.services import analytics as analytics_service
from survey_api.services.export import analytics_csv, analytics_workbook
from survey_api.services.store import SurveyStore, get_store

router = APIRouter(
    prefix="/analytics",
    tags=["admin-analytics"],
    dependencies=[Depends(require_admin), Depends(survey_in_scope)],
)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/{survey_id}", response_model=SurveyAnalytics)
def survey_analytics(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    return analytics_service.get_survey_analytics(store, survey_id)


@router.get("/{survey_id}/sections", response_model=SectionAnalyticsOut)
def section_analytics(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    return analytics_service.get_section_analytics(store, survey_id)


@router.get("/{survey_id}/audit", response_model=AuditAnalytics)
def audit_analytics(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    return analytics_service.get_audit_analytics(store, survey_id)


@router.get("/{survey_id}/export.xlsx")
def export_xlsx(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    analytics = analytics_service.get_survey_analytics(store, survey_id)
    sections = analytics_service.get_section_analytics(store, survey_id)
    content = analytics_workbook(analytics, sections)

    filename = f"survey_{survey_id}.xlsx"
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{survey_id}/export.csv")
def export_csv(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    analytics = analytics_service.get_survey_analytics(store, survey_id)
    content = analytics_csv(analytics)

    filename = f"survey_{survey_id}_questions.csv"
    return StreamingResponse(
        iter([content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
