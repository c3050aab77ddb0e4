import os
from dotenv import load_dotenv

load_dotenv()

DATA_DIR = os.getenv("ESSAY_TUTOR_DATA_DIR", "data")

# Upload limits
MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # whole request
MAX_FILE_BYTES = 10 * 1024 * 1024    # per page / file
MAX_FILES = 10

ALLOWED_EXTENSIONS = {".pdf", ".docx", ".txt", ".png", ".jpg", ".jpeg", ".webp"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}
MIME_ALLOW = {
    ".pdf": {"application/pdf"},
    ".docx": {
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/zip",
    },
    ".txt": {"text/plain"},
    ".png": {"image/png"},
    ".jpg": {"image/jpeg"},
    ".jpeg": {"image/jpeg"},
    ".webp": {"image/webp"},
}

# Evaluator
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_VISION_MODEL = os.getenv("OPENAI_VISION_MODEL", "gpt-4o")
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "60"))
LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "2"))

DEFAULT_RUBRIC_ID = os.getenv("DEFAULT_RUBRIC", "essay-tutor")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Statistics thresholds
LONG_SENTENCE_WORDS = 20
SHORT_SENTENCE_WORDS = 8
COMPLEX_WORD_CHARS = 6
