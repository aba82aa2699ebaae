from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.chat import get_recognizer
from models.immigration import ClassifierResult
from services.recognizer import Recognizer, RecognizerError


router = APIRouter(
    prefix="/classify",
    tags=["classification"]
)


class ClassifyRequest(BaseModel):
    utterance: str = Field(min_length=1)  # "Can I do CPT on an F1 visa?"


class ClassifyResponse(BaseModel):
    result: ClassifierResult
    raw_utterance: str  # Echo back what was sent (useful for debugging)


@router.post("/", response_model=ClassifyResponse)
async def classify_utterance(request: ClassifyRequest, recognizer: Recognizer = Depends(get_recognizer)):
    """
    Runs the intent classifier on one utterance, without touching any
    conversation. Handy for checking what the language app extracts.

    Example input:
    {
        "utterance": "am I eligible for cpt on my f1 visa"
    }

    Example output:
    {
        "result": {
            "text": "am I eligible for cpt on my f1 visa",
            "top_intent": "eligibility",
            "intents": {"eligibility": 0.97, "None": 0.02},
            "entities": {"visa_type": "f1", "work_type": "cpt", ...}
        },
        "raw_utterance": "am I eligible for cpt on my f1 visa"
    }
    """
    if not recognizer.is_configured:
        raise HTTPException(status_code=503, detail="No intent classifier is configured")

    try:
        result = await recognizer.classify(request.utterance)
    except RecognizerError as e:
        raise HTTPException(
            status_code=502,
            detail=f"The intent classifier failed: {str(e)}"
        )

    return ClassifyResponse(result=result, raw_utterance=request.utterance)
