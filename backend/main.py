import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from api.chat import get_recognizer, router as chat_router
from api.classify import router as classify_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Close the classifier's HTTP client, if one was ever created
    if get_recognizer.cache_info().currsize:
        aclose = getattr(get_recognizer(), "aclose", None)
        if aclose is not None:
            await aclose()
        get_recognizer.cache_clear()


app = FastAPI(
    title="Visa Work Bot API",
    description="Answers F1 work-authorization questions",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router)      # POST /chat/messages and session endpoints
app.include_router(classify_router)  # POST /classify/


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "version": app.version,
        "classifier_backend": settings.CLASSIFIER_BACKEND,
    }

# Run with: uvicorn main:app --reload  (from the backend/ directory)
# Docs at: http://localhost:8000/docs
