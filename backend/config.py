from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Environment configuration. Everything can be set in the shell
    or in a .env file next to main.py.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # ---- Intent classifier ----
    # "luis" = Azure LUIS app, "llm" = Groq/Ollama, "none" = always use defaults
    CLASSIFIER_BACKEND: str = "luis"

    LUIS_APP_ID: str = ""
    LUIS_API_KEY: str = ""
    LUIS_API_HOST_NAME: str = ""
    LUIS_SLOT: str = "production"
    LUIS_TIMEOUT_SECONDS: float = 10.0

    # ---- LLM (used when CLASSIFIER_BACKEND=llm) ----
    GROQ_API_KEY: str = ""
    GROQ_MODEL: str = "llama-3.1-8b-instant"
    OLLAMA_MODEL: str = "llama3.2"
    LLM_TEMPERATURE: float = 0.1

    # ---- Dialog behaviour ----
    # False: missing details are filled with f1 / opt / student.
    # True: the bot asks for each missing detail.
    PROMPT_FOR_MISSING_DETAILS: bool = False

    # ---- Server ----
    ALLOWED_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
