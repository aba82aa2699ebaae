from typing import Optional

from models.conversation import ConversationState


class SessionStore:
    """
    In-memory conversation state, keyed by session_id.

    LIMITATION: lives in RAM. Restarting the server forgets every
    conversation in progress.
    """

    def __init__(self):
        self._sessions: dict[str, ConversationState] = {}

    def get(self, session_id: str) -> Optional[ConversationState]:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> ConversationState:
        if session_id not in self._sessions:
            self._sessions[session_id] = ConversationState(session_id=session_id)
        return self._sessions[session_id]

    def save(self, state: ConversationState) -> None:
        self._sessions[state.session_id] = state

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
