from typing import Literal
from fastapi import APIRouter, Query, HTTPException
from app.services.export import export_report
from app.services.pipeline import load_report
from app.utils.storage import doc_dir_for

router = APIRouter(tags=["export"])

@router.post("/export")
def export(
    doc_id: str = Query(..., description="Document ID returned by /upload or /process-text"),
    fmt: Literal["html", "pdf", "docx"] = Query("pdf", description="Output format")
):
    doc_dir = doc_dir_for(doc_id)
    if doc_dir is None:
        raise HTTPException(status_code=404, detail="Document not found")

    report = load_report(doc_dir)
    if report is None:
        raise HTTPException(status_code=404, detail="Document has not been evaluated yet")

    out_path = export_report(report, doc_dir, fmt=fmt)
    # return a simple payload with where to fetch it from
    return {
        "doc_id": doc_id,
        "format": fmt,
        "report_path": out_path
    }
