import logging
from typing import Callable, Optional

from models.conversation import CollectionStep, DetailCollectionResult
from models.immigration import UserInfo

logger = logging.getLogger(__name__)

DEFAULT_VISA_TYPE = "f1"
DEFAULT_WORK_TYPE = "opt"
DEFAULT_OCCUPATION_STATUS = "student"

VISA_TYPE_PROMPT = "What visa type do you currently have?"
WORK_TYPE_PROMPT = "What work authorization do you want to learn about?"
OCCUPATION_STATUS_PROMPT = (
    'What job do you currently hold? If you do not currently have a job, just reply "student".'
)


class DetailCollectionDialog:
    """
    Fills in visa type, work type and occupation status, in that order.

    Each step either keeps the value already on the record, asks the user
    for it (prompt_for_missing=True), or substitutes the default. The
    record passed in is mutated in place and returned in the result.

    Usage:
        dialog = DetailCollectionDialog()
        result = dialog.begin(UserInfo())
        # result.completed -> True, visa_type="f1", work_type="opt", occupation_status="student"
    """

    STEPS = (
        CollectionStep.VISA_TYPE,
        CollectionStep.WORK_TYPE,
        CollectionStep.OCCUPATION_STATUS,
    )

    def __init__(self, prompt_for_missing: bool = False):
        self.prompt_for_missing = prompt_for_missing
        self._steps: dict[CollectionStep, Callable[[UserInfo], Optional[str]]] = {
            CollectionStep.VISA_TYPE: self.visa_type_step,
            CollectionStep.WORK_TYPE: self.work_type_step,
            CollectionStep.OCCUPATION_STATUS: self.occupation_status_step,
        }

    # ---- Steps ----
    # Each returns a prompt when it needs to wait for the user, otherwise None.

    def visa_type_step(self, user_info: UserInfo) -> Optional[str]:
        if not user_info.visa_type:
            if self.prompt_for_missing:
                return VISA_TYPE_PROMPT
            user_info.visa_type = DEFAULT_VISA_TYPE
        return None

    def work_type_step(self, user_info: UserInfo) -> Optional[str]:
        if not user_info.work_type:
            if self.prompt_for_missing:
                return WORK_TYPE_PROMPT
            user_info.work_type = DEFAULT_WORK_TYPE
        return None

    def occupation_status_step(self, user_info: UserInfo) -> Optional[str]:
        if not user_info.occupation_status:
            if self.prompt_for_missing:
                return OCCUPATION_STATUS_PROMPT
            user_info.occupation_status = DEFAULT_OCCUPATION_STATUS
        return None

    # ---- Driving the steps ----

    def begin(self, user_info: UserInfo) -> DetailCollectionResult:
        """Run from the first step with whatever the classifier already found."""
        return self._run_from(0, user_info)

    def resume(self, user_info: UserInfo, pending_step: CollectionStep, answer: str) -> DetailCollectionResult:
        """Store the user's answer for the step we asked about, then carry on."""
        answer = (answer or "").strip()
        if answer:
            setattr(user_info, pending_step.value, answer.lower())
        return self._run_from(self.STEPS.index(pending_step), user_info)

    def _run_from(self, index: int, user_info: UserInfo) -> DetailCollectionResult:
        for step in self.STEPS[index:]:
            prompt = self._steps[step](user_info)
            if prompt is not None:
                logger.debug("Detail collection waiting on %s", step.value)
                return DetailCollectionResult(
                    completed=False,
                    user_info=user_info,
                    pending_step=step,
                    prompt=prompt,
                )
        return DetailCollectionResult(completed=True, user_info=user_info)
