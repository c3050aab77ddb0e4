import os
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import FileResponse
from app.utils.storage import doc_dir_for

router = APIRouter(tags=["download"])

@router.get("/download")
def download(
    doc_id: str = Query(..., description="Document ID returned by /upload"),
    filename: str = Query(..., description="File in the doc folder, e.g. report.pdf or report.docx")
):
    doc_dir = doc_dir_for(doc_id)
    if doc_dir is None:
        raise HTTPException(status_code=404, detail="Document not found")
    if os.path.basename(filename) != filename or filename.startswith("."):
        raise HTTPException(status_code=400, detail="Invalid filename")
    path = os.path.join(doc_dir, filename)
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path, filename=filename)
