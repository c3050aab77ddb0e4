import os, uuid, shutil, tempfile, logging
from typing import List, Optional, Sequence, Tuple
from fastapi import UploadFile, HTTPException
import magic
from app.core import config

log = logging.getLogger("storage")


async def _spool(file: UploadFile) -> str:
    size = 0
    with tempfile.NamedTemporaryFile(delete=False) as tmp:
        tmp_path = tmp.name
        while True:
            chunk = await file.read(1 << 20)  # 1 MB
            if not chunk:
                break
            size += len(chunk)
            if size > config.MAX_FILE_BYTES:
                tmp.close()
                os.remove(tmp_path)
                raise HTTPException(status_code=413, detail=f"{file.filename} exceeds {config.MAX_FILE_BYTES // (1 << 20)}MB")
            tmp.write(chunk)
    return tmp_path


def _check_ext(file: UploadFile) -> str:
    _, ext = os.path.splitext(file.filename or "")
    ext = ext.lower()
    if ext not in config.ALLOWED_EXTENSIONS:
        allowed = ", ".join(sorted(config.ALLOWED_EXTENSIONS))
        raise HTTPException(status_code=400, detail=f"Only {allowed} files are allowed")
    return ext


async def save_secure(files: Sequence[UploadFile]) -> Tuple[str, List[str]]:
    """Store the pages of one essay under a fresh doc_id, keeping upload order."""
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")
    if len(files) > config.MAX_FILES:
        raise HTTPException(status_code=400, detail=f"At most {config.MAX_FILES} files per essay")

    exts = [_check_ext(f) for f in files]
    mime = magic.Magic(mime=True)
    spooled: List[Tuple[str, str]] = []
    try:
        for file, ext in zip(files, exts):
            tmp_path = await _spool(file)
            spooled.append((tmp_path, ext))
            file_mime = mime.from_file(tmp_path)
            if file_mime not in config.MIME_ALLOW[ext]:
                raise HTTPException(
                    status_code=400,
                    detail=f"Unexpected MIME type: {file_mime} for {ext}"
                )
    except HTTPException:
        for tmp_path, _ in spooled:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        raise

    doc_id, doc_dir = new_doc()
    paths = []
    for n, (tmp_path, ext) in enumerate(spooled, start=1):
        dest = os.path.join(doc_dir, f"original_{n:02d}{ext}")
        shutil.move(tmp_path, dest)
        paths.append(dest)
    log.info("Stored %d file(s) for doc %s", len(paths), doc_id)
    return doc_id, paths


def doc_dir_for(doc_id: str) -> Optional[str]:
    # doc ids are hex; anything else cannot be ours
    if not doc_id or not all(c in "0123456789abcdef" for c in doc_id):
        return None
    path = os.path.join(config.DATA_DIR, doc_id)
    return path if os.path.isdir(path) else None


def original_paths(doc_dir: str) -> List[str]:
    return [os.path.join(doc_dir, f) for f in sorted(os.listdir(doc_dir)) if f.startswith("original_")]


def new_doc() -> Tuple[str, str]:
    doc_id = uuid.uuid4().hex[:12]
    doc_dir = os.path.join(config.DATA_DIR, doc_id)
    os.makedirs(doc_dir, mode=0o700, exist_ok=True)
    return doc_id, doc_dir
