# survey_api/services/export.py
"""Exportación de la analítica de una encuesta a Excel y CSV."""
from __future__ import annotations

import csv
import io
import json
from typing import Optional

from openpyxl import Workbook

from survey_api.schemas.analytics import SectionAnalyticsOut, SurveyAnalytics

QUESTION_HEADERS = [
    "question_id", "question", "type", "responses",
    "avg_rating", "r1", "r2", "r3", "r4", "r5",
    "yes_count", "no_count",
]


def _question_rows(analytics: SurveyAnalytics) -> list[list]:
    rows = []
    for q in analytics.question_analytics:
        dist = q.distribution or [None] * 5
        rows.append([
            str(q.question_id), q.question, q.type, q.response_count,
            q.avg_rating, *dist,
            q.yes_count, q.no_count,
        ])
    return rows


def analytics_workbook(
    analytics: SurveyAnalytics,
    sections: Optional[SectionAnalyticsOut] = None,
) -> bytes:
    wb = Workbook()
    ws_res = wb.active
    ws_res.title = "Resumen"
    ws_res.append(["survey_id", "total_responses", "avg_completion_minutes", "generated_at"])
    ws_res.append([
        str(analytics.survey_id),
        analytics.total_responses,
        analytics.average_completion_time,
        analytics.generated_at.isoformat(),
    ])

    ws_dep = wb.create_sheet("Departamentos")
    ws_dep.append(["department", "responses"])
    for d in analytics.department_breakdown:
        ws_dep.append([d.name or "", d.count])

    ws_q = wb.create_sheet("Preguntas")
    ws_q.append(QUESTION_HEADERS)
    for row in _question_rows(analytics):
        ws_q.append(row)

    if sections is not None:
        ws_sec = wb.create_sheet("Secciones")
        ws_sec.append([
            "section", "order", "rating_average", "rating_count",
            "rating_variance", "rating_std_deviation", "questions", "responses", "other_counts",
        ])
        for s in sections.sections:
            ws_sec.append([
                s.section_title, s.section_order, s.rating_average, s.rating_count,
                s.rating_variance, s.rating_std_deviation, s.total_questions, s.total_responses,
                json.dumps(s.other_question_counts),
            ])

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def analytics_csv(analytics: SurveyAnalytics) -> str:
    buf = io.StringIO()
    buf.write("\ufeff")  # BOM para Excel
    w = csv.writer(buf)
    w.writerow(QUESTION_HEADERS)
    for row in _question_rows(analytics):
        w.writerow(["" if v is None else v for v in row])
    return buf.getvalue()
