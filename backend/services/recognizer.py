import logging
from typing import Any, Optional, Protocol

import httpx
from langchain_core.exceptions import OutputParserException
from langchain_core.language_models import BaseLanguageModel
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import Settings
from models.immigration import ClassifierResult, ExtractedEntities, NONE_INTENT

logger = logging.getLogger(__name__)


class RecognizerError(Exception):
    """The intent classifier could not be reached or gave an unusable answer."""


class Recognizer(Protocol):
    """
    What the dialogs need from an intent classifier.
    The classifier itself is an external service, we only query it.
    """

    @property
    def is_configured(self) -> bool: ...

    async def classify(self, utterance: str) -> ClassifierResult: ...


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = " ".join(str(value).split()).lower()
    return value or None


# -------------------------------------------------------
# LUIS
#
# Queries a published LUIS app through the v3 prediction
# endpoint. Entities come back in a few shapes depending on
# how the app defines them:
#   list entity       {"visa_type": [["f1"]]}
#   simple / prebuilt {"visa_type": ["f1"]}
#   ML with children  {"visa_type": [{"visa_type": [["f1"]], "$instance": {...}}]}
# Everything is flattened to one plain string per entity.
# -------------------------------------------------------

ENTITY_NAMES = {
    "visa_type": ("visa_type", "VisaType", "visaType"),
    "work_type": ("work_type", "WorkType", "workType"),
    "occupation_status": ("occupation_status", "OccupationStatus", "occupationStatus"),
}


def _first_value(value: Any, child: Optional[str] = None) -> Optional[str]:
    """Dig the first plain string out of a LUIS entity value."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        for item in value:
            found = _first_value(item, child)
            if found:
                return found
        return None
    if isinstance(value, dict):
        if child is not None:
            return _first_value(value[child], child) if child in value else None
        for key, item in value.items():
            if key.startswith("$"):
                continue
            found = _first_value(item)
            if found:
                return found
    return None


def _entity(entities: dict, names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        if name in entities:
            return _clean(_first_value(entities[name]))
    return None


def _instance_text(entities: dict, name: str) -> Optional[str]:
    instances = entities.get("$instance", {}).get(name) or []
    if instances and isinstance(instances[0], dict):
        return instances[0].get("text")
    return None


def _airport(entities: dict, name: str) -> Optional[str]:
    """From / To composite entities carry the canonical airport as a child list entity."""
    composite = entities.get(name)
    if not composite:
        return None
    airport = _first_value(composite, "Airport")
    if airport is None and _instance_text(entities, name):
        logger.info("'%s' was recognized but is not a supported airport", _instance_text(entities, name))
    return airport


def _travel_date(entities: dict) -> Optional[str]:
    for datetime_entity in entities.get("datetimeV2") or entities.get("datetime") or []:
        values = datetime_entity.get("values") or [datetime_entity]
        for value in values:
            timex = value.get("timex")
            if isinstance(timex, list):
                timex = timex[0] if timex else None
            if timex:
                return timex.split("T")[0]
    return None


def parse_luis_prediction(payload: dict) -> ClassifierResult:
    """Turn a LUIS v3 prediction response into a ClassifierResult."""
    prediction = payload.get("prediction") or {}
    entities = prediction.get("entities") or {}

    intents = {
        name: float((scores or {}).get("score", 0.0))
        for name, scores in (prediction.get("intents") or {}).items()
    }

    return ClassifierResult(
        text=payload.get("query", ""),
        top_intent=prediction.get("topIntent") or NONE_INTENT,
        intents=intents,
        entities=ExtractedEntities(
            visa_type=_entity(entities, ENTITY_NAMES["visa_type"]),
            work_type=_entity(entities, ENTITY_NAMES["work_type"]),
            occupation_status=_entity(entities, ENTITY_NAMES["occupation_status"]),
            origin=_airport(entities, "From"),
            destination=_airport(entities, "To"),
            travel_date=_travel_date(entities),
        ),
    )


class LuisRecognizer:
    """Intent classifier backed by a published LUIS app."""

    def __init__(
        self,
        app_id: str,
        api_key: str,
        host_name: str,
        slot: str = "production",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.app_id = app_id
        self.api_key = api_key
        self.host_name = host_name.replace("https://", "").replace("http://", "").rstrip("/")
        self.slot = slot
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "LuisRecognizer":
        return cls(
            app_id=settings.LUIS_APP_ID,
            api_key=settings.LUIS_API_KEY,
            host_name=settings.LUIS_API_HOST_NAME,
            slot=settings.LUIS_SLOT,
            timeout=settings.LUIS_TIMEOUT_SECONDS,
            **kwargs,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.app_id and self.api_key and self.host_name)

    @property
    def endpoint(self) -> str:
        return f"https://{self.host_name}/luis/prediction/v3.0/apps/{self.app_id}/slots/{self.slot}/predict"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True
    )
    async def _query(self, utterance: str) -> dict:
        response = await self._client.get(
            self.endpoint,
            params={
                "subscription-key": self.api_key,
                "query": utterance,
                "verbose": "true",
                "show-all-intents": "true",
            },
        )
        response.raise_for_status()
        return response.json()

    async def classify(self, utterance: str) -> ClassifierResult:
        if not self.is_configured:
            raise RecognizerError("LUIS is not configured")
        try:
            payload = await self._query(utterance)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("LUIS query failed: %s", e)
            raise RecognizerError(f"LUIS query failed: {e}") from e
        return parse_luis_prediction(payload)

    async def aclose(self) -> None:
        await self._client.aclose()


# -------------------------------------------------------
# LLM
#
# Same contract, answered by Groq / Ollama through a
# prompt → LLM → parser chain.
# -------------------------------------------------------

CLASSIFY_SYSTEM_PROMPT = """You are the intent classifier for a chat bot that answers questions
about US student visas and work authorization.

Pick exactly one intent for the user's message:
- eligibility: asks whether they are allowed to work (e.g. "Can I work on campus with an F1?")
- visa_information: asks what a visa or work authorization is or allows (e.g. "What is CPT?")
- procedure_auth: asks how to apply for or obtain work authorization (e.g. "How do I apply for OPT?")
- None: anything else

Extract these entities when the message mentions them, otherwise leave them null:
- visa_type: lower-case visa code without punctuation, e.g. "f1", "j1", "h1b"
- work_type: one of "on campus", "cpt", "opt"
- occupation_status: the user's current job, or "student"

{format_instructions}
"""

# Bad JSON from the model, or the model server dropping the connection
RETRYABLE_LLM_ERRORS = (OutputParserException, httpx.TransportError, ConnectionError, TimeoutError)


class LlmRecognizer:
    """Intent classifier backed by an LLM."""

    def __init__(self, llm: Optional[BaseLanguageModel]):
        self.llm = llm
        self.parser = PydanticOutputParser(pydantic_object=ClassifierResult)
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", CLASSIFY_SYSTEM_PROMPT),
            ("human", "{utterance}")
        ]).partial(format_instructions=self.parser.get_format_instructions())
        self.chain = self.prompt | llm | self.parser if llm is not None else None

    @property
    def is_configured(self) -> bool:
        return self.chain is not None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(RETRYABLE_LLM_ERRORS),
        reraise=True
    )
    async def _run_chain(self, utterance: str) -> ClassifierResult:
        return await self.chain.ainvoke({"utterance": utterance})

    async def classify(self, utterance: str) -> ClassifierResult:
        if not self.is_configured:
            raise RecognizerError("LLM classifier is not configured")
        try:
            result = await self._run_chain(utterance)
        except OutputParserException as e:
            logger.warning("Could not parse classifier output after 3 attempts: %s", e)
            raise RecognizerError(f"Could not parse classifier output: {e}") from e
        except Exception as e:
            logger.warning("LLM classifier call failed: %s", e)
            raise RecognizerError(f"LLM classifier call failed: {e}") from e

        top_intent = result.top_intent.strip() or NONE_INTENT
        return result.model_copy(update={
            "text": utterance,
            "top_intent": top_intent,
            "entities": ExtractedEntities(**{
                key: _clean(value) for key, value in result.entities.model_dump().items()
            }),
        })


class UnconfiguredRecognizer:
    """Stand-in used when CLASSIFIER_BACKEND=none."""

    is_configured = False

    async def classify(self, utterance: str) -> ClassifierResult:
        raise RecognizerError("No intent classifier is configured")


def build_recognizer(settings: Settings) -> Recognizer:
    backend = settings.CLASSIFIER_BACKEND.strip().lower()
    if backend == "luis":
        return LuisRecognizer.from_settings(settings)
    if backend == "llm":
        from services.llm import get_llm
        return LlmRecognizer(get_llm(settings))
    if backend != "none":
        logger.warning("Unknown CLASSIFIER_BACKEND %r, running without a classifier", settings.CLASSIFIER_BACKEND)
    return UnconfiguredRecognizer()
