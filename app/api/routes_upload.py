from typing import List
from fastapi import APIRouter, UploadFile, File
from app.utils.storage import save_secure

router = APIRouter(tags=["upload"])

@router.post("/upload")
async def upload(files: List[UploadFile] = File(..., description="Essay pages in reading order")):
    doc_id, paths = await save_secure(files)
    return {"doc_id": doc_id, "stored_paths": paths, "pages": len(paths)}
