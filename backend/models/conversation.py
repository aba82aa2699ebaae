from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from models.immigration import UserInfo


class DialogState(str, Enum):
    IDLE = "idle"                                # nothing in flight, next message starts over
    AWAITING_UTTERANCE = "awaiting_utterance"    # greeting sent, waiting for a question
    COLLECTING_DETAILS = "collecting_details"    # detail dialog suspended on a prompt


class CollectionStep(str, Enum):
    VISA_TYPE = "visa_type"
    WORK_TYPE = "work_type"
    OCCUPATION_STATUS = "occupation_status"


class ConversationState(BaseModel):
    """Everything the bot remembers about one session between messages."""
    session_id: str
    state: DialogState = DialogState.IDLE
    user_info: Optional[UserInfo] = None
    pending_step: Optional[CollectionStep] = None
    turns: int = 0


class DetailCollectionResult(BaseModel):
    """
    Outcome of running the detail-collection dialog.

    Either `completed` is true and `user_info` is fully populated, or the
    dialog stopped at `pending_step` and `prompt` must be sent to the user.
    """
    completed: bool
    user_info: UserInfo
    pending_step: Optional[CollectionStep] = None
    prompt: Optional[str] = None


class TurnResult(BaseModel):
    replies: list[str] = Field(default_factory=list)
    state: DialogState
