from typing import Optional
from langchain_community.llms import Ollama
from langchain_core.language_models import BaseLanguageModel

from config import Settings, get_settings


def get_llm(settings: Optional[Settings] = None, temperature: Optional[float] = None) -> BaseLanguageModel:
    """
    LLM factory: Groq when a key is configured, local Ollama otherwise.
    Used by the LLM-backed intent classifier.
    """
    settings = settings or get_settings()
    if temperature is None:
        temperature = settings.LLM_TEMPERATURE

    if settings.GROQ_API_KEY:
        from langchain_groq import ChatGroq
        return ChatGroq(
            model_name=settings.GROQ_MODEL,
            api_key=settings.GROQ_API_KEY,
            temperature=temperature,
            max_tokens=512
        )

    return Ollama(
        model=settings.OLLAMA_MODEL,
        temperature=temperature,
    )
