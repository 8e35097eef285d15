import sys
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from skillcheck.application.errors import AppError
from skillcheck.infrastructure.config import LOG_LEVEL
from skillcheck.infrastructure.db.session import Base, engine
from skillcheck.infrastructure.db import models  # noqa: F401  registers tables
from skillcheck.presentation.api.routers.admin_router import router as admin_router
from skillcheck.presentation.api.routers.assessment_router import router as assessment_router
from skillcheck.presentation.api.routers.attempt_router import router as attempt_router

# Create tables
Base.metadata.create_all(bind=engine)

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(title="SkillCheck Assessment API")


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"Internal error on {request.method} {request.url.path}: {exc.context}", exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_message()})


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal server error occurred."}
    )

# Include routers
app.include_router(assessment_router)
app.include_router(attempt_router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {"message": "Welcome to SkillCheck Assessment API"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
