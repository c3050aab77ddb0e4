import logging
from fastapi import FastAPI
from app.core import config
from app.core.rubrics import list_rubrics
from app.api.routes_upload import router as upload_router
from app.api.routes_evaluate import router as evaluate_router
from app.api.routes_export import router as export_router
from app.middleware.limits import BodySizeLimitMiddleware
from app.api.routes_download import router as download_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Essay Tutor")

app.add_middleware(BodySizeLimitMiddleware)

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/rubrics")
def rubrics():
    return {"rubrics": list_rubrics(), "default": config.DEFAULT_RUBRIC_ID}

app.include_router(upload_router)
app.include_router(evaluate_router)
app.include_router(export_router)
app.include_router(download_router)
