import logging
from typing import Awaitable, Callable, Optional

from dialogs.detail_collection import DetailCollectionDialog
from dialogs.responses import select_response
from models.conversation import ConversationState, DetailCollectionResult, DialogState, TurnResult
from models.immigration import GET_WEATHER_INTENT, IntentType, UserInfo
from services.recognizer import Recognizer, RecognizerError

logger = logging.getLogger(__name__)

GREETING_MESSAGE = "Hi! What would you like to know about your visa and occupation status?"
RESTART_MESSAGE = "What else can I do for you?"
NOT_CONFIGURED_MESSAGE = (
    "NOTE: LUIS is not configured. To enable all capabilities, add `LuisAppId`, "
    "`LuisAPIKey` and `LuisAPIHostName` to the .env file."
)
GET_WEATHER_MESSAGE = "TODO: get weather flow here"
DIDNT_UNDERSTAND_TEMPLATE = "Sorry, I didn't get that. Please try asking in a different way (intent was {intent})"
CLASSIFIER_UNAVAILABLE_MESSAGE = "Sorry, I couldn't reach the language service right now. Please try again."

Handler = Callable[[ConversationState, str, list[str]], Awaitable[None]]


class MainDialog:
    """
    Top-level conversation loop for one session.

    IDLE                --message-->  greeting sent, AWAITING_UTTERANCE
    AWAITING_UTTERANCE  --message-->  classify, collect details, answer, back to AWAITING_UTTERANCE
    COLLECTING_DETAILS  --message-->  answer stored, continue collecting or answer

    With no classifier configured every message skips the greeting,
    collects details with defaults, answers, and returns to IDLE.

    The dialog keeps no per-session data itself; everything lives on the
    ConversationState passed to on_message().
    """

    def __init__(self, recognizer: Recognizer, detail_dialog: DetailCollectionDialog):
        if recognizer is None:
            raise ValueError("[MainDialog]: Missing parameter 'recognizer' is required")
        if detail_dialog is None:
            raise ValueError("[MainDialog]: Missing parameter 'detail_dialog' is required")
        self.recognizer = recognizer
        self.detail_dialog = detail_dialog

        self._handlers: dict[DialogState, Handler] = {
            DialogState.IDLE: self._on_idle,
            DialogState.AWAITING_UTTERANCE: self._on_utterance,
            DialogState.COLLECTING_DETAILS: self._on_detail_answer,
        }

    async def start(self, state: ConversationState) -> TurnResult:
        """Open a conversation without waiting for the user to say something first."""
        replies: list[str] = []
        await self._begin(state, replies)
        return TurnResult(replies=replies, state=state.state)

    async def on_message(self, state: ConversationState, text: str) -> TurnResult:
        """Handle one inbound user message and return the bot's replies."""
        state.turns += 1
        replies: list[str] = []
        await self._handlers[state.state](state, text, replies)
        return TurnResult(replies=replies, state=state.state)

    # ---- Greeting ----

    async def _begin(self, state: ConversationState, replies: list[str], restart_message: Optional[str] = None) -> None:
        state.user_info = None
        state.pending_step = None
        if not self.recognizer.is_configured:
            replies.append(NOT_CONFIGURED_MESSAGE)
            await self._collect(state, UserInfo(), replies)
            return
        replies.append(restart_message or GREETING_MESSAGE)
        state.state = DialogState.AWAITING_UTTERANCE

    async def _on_idle(self, state: ConversationState, text: str, replies: list[str]) -> None:
        await self._begin(state, replies)

    # ---- Classification ----

    async def _on_utterance(self, state: ConversationState, text: str, replies: list[str]) -> None:
        try:
            result = await self.recognizer.classify(text)
        except RecognizerError as e:
            logger.warning("Classification failed for session %s: %s", state.session_id, e)
            replies.append(CLASSIFIER_UNAVAILABLE_MESSAGE)
            await self._restart(state, replies)
            return

        logger.info("Top intent for session %s: %s", state.session_id, result.top_intent)

        try:
            intent = IntentType(result.top_intent)
        except ValueError:
            intent = None

        if intent is not None:
            user_info = result.to_user_info(intent)
            logger.info("Extracted details: %s", user_info.model_dump_json())
            await self._collect(state, user_info, replies)
        elif result.top_intent == GET_WEATHER_INTENT:
            replies.append(GET_WEATHER_MESSAGE)
            await self._restart(state, replies)
        else:
            replies.append(DIDNT_UNDERSTAND_TEMPLATE.format(intent=result.top_intent))
            await self._restart(state, replies)

    # ---- Detail collection ----

    async def _collect(self, state: ConversationState, user_info: UserInfo, replies: list[str]) -> None:
        outcome = self.detail_dialog.begin(user_info)
        await self._after_collection(state, outcome, replies)

    async def _on_detail_answer(self, state: ConversationState, text: str, replies: list[str]) -> None:
        if state.user_info is None or state.pending_step is None:
            # Nothing to resume, treat it like a fresh question
            await self._begin(state, replies)
            return
        outcome = self.detail_dialog.resume(state.user_info, state.pending_step, text)
        await self._after_collection(state, outcome, replies)

    async def _after_collection(self, state: ConversationState, outcome: DetailCollectionResult, replies: list[str]) -> None:
        if not outcome.completed:
            state.state = DialogState.COLLECTING_DETAILS
            state.user_info = outcome.user_info
            state.pending_step = outcome.pending_step
            replies.append(outcome.prompt)
            return
        await self._resolve(state, outcome.user_info, replies)

    # ---- Resolution ----

    async def _resolve(self, state: ConversationState, user_info: UserInfo, replies: list[str]) -> None:
        replies.append(select_response(user_info.visa_type, user_info.work_type))
        state.user_info = None
        state.pending_step = None
        await self._restart(state, replies)

    async def _restart(self, state: ConversationState, replies: list[str]) -> None:
        if self.recognizer.is_configured:
            await self._begin(state, replies, restart_message=RESTART_MESSAGE)
        else:
            state.state = DialogState.IDLE
