# main.py
import os
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from db import init_db
from routers import (
    analytics, chapters, class_levels, exam_structures, exams, imports,
    questions, scheduled_exams, schools, subjects, users,
)

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# -----------------------------------------------------------------------------
# App & CORS
# -----------------------------------------------------------------------------
app = FastAPI(title="ExamDesk – Exam Authoring Backend")

origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create tables at startup
init_db()


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("[API] Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------
@app.get("/api/health")
def health():
    return {"status": "ok"}


# -----------------------------------------------------------------------------
# Resources
# -----------------------------------------------------------------------------
for module in (
    subjects, chapters, questions, imports, class_levels, exam_structures,
    scheduled_exams, exams, schools, users, analytics,
):
    app.include_router(module.router, prefix=API_PREFIX)
