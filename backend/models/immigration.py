from enum import Enum
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class IntentType(str, Enum):
    """Intents the visa flow knows how to answer."""
    ELIGIBILITY = "eligibility"
    VISA_INFORMATION = "visa_information"
    PROCEDURE_AUTH = "procedure_auth"


# Intents the classifier can return that are not part of the visa flow
GET_WEATHER_INTENT = "GetWeather"
BOOK_FLIGHT_INTENT = "BookFlight"
NONE_INTENT = "None"


class UserInfo(BaseModel):
    """
    The details collected for one conversation turn.

    Filled first from the classifier's entities, then by the
    detail-collection dialog (defaults or user answers). The dialog
    mutates this record in place, so it is the single accumulator
    for the turn.
    """
    model_config = ConfigDict(validate_assignment=True)

    type: Optional[IntentType] = None
    visa_type: Optional[str] = None
    work_type: Optional[str] = None
    occupation_status: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.visa_type and self.work_type and self.occupation_status)


class ExtractedEntities(BaseModel):
    """
    Entity values pulled out of an utterance, one plain string per entity.

    origin / destination / travel_date belong to the flight-booking
    model the language app was trained from; nothing in the visa flow
    reads them.
    """
    visa_type: Optional[str] = Field(default=None, description="Visa type such as 'f1', 'h1b', 'j1'")
    work_type: Optional[str] = Field(default=None, description="Work authorization: 'on campus', 'cpt' or 'opt'")
    occupation_status: Optional[str] = Field(default=None, description="Current job, or 'student'")
    origin: Optional[str] = Field(default=None, description="Flight origin airport, if mentioned")
    destination: Optional[str] = Field(default=None, description="Flight destination airport, if mentioned")
    travel_date: Optional[str] = Field(default=None, description="Travel date as an ISO date, if mentioned")


class ClassifierResult(BaseModel):
    """
    What the intent classifier tells us about one utterance.

    Every field has a description so the LLM-backed classifier can
    use this model as its output schema.
    """
    text: str = Field(default="", description="The utterance that was classified")
    top_intent: str = Field(
        description="Single intent label: 'eligibility', 'visa_information', 'procedure_auth', or 'None' if nothing fits"
    )
    intents: Dict[str, float] = Field(
        default_factory=dict,
        description="Score between 0 and 1 for each intent considered"
    )
    entities: ExtractedEntities = Field(default_factory=ExtractedEntities)

    def to_user_info(self, intent: IntentType) -> UserInfo:
        """Build the canonical UserInfo for a visa-flow intent."""
        info = UserInfo(type=intent, visa_type=self.entities.visa_type)
        # procedure_auth questions only ever carry the visa type
        if intent in (IntentType.ELIGIBILITY, IntentType.VISA_INFORMATION):
            info.work_type = self.entities.work_type
        if intent == IntentType.ELIGIBILITY:
            info.occupation_status = self.entities.occupation_status
        return info


class ResponseEntry(BaseModel):
    """One row of the work-authorization answer table."""
    model_config = ConfigDict(frozen=True)

    visa_type: str
    work_type: str
    text: str
