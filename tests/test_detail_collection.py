"""
Tests for the visa / work type / occupation collection steps
"""
import pytest

from dialogs.detail_collection import (
    OCCUPATION_STATUS_PROMPT,
    VISA_TYPE_PROMPT,
    WORK_TYPE_PROMPT,
    DetailCollectionDialog,
)
from models.conversation import CollectionStep
from models.immigration import IntentType, UserInfo


class TestDefaults:

    @pytest.mark.parametrize("user_info", [
        UserInfo(),
        UserInfo(visa_type="j1"),
        UserInfo(work_type="cpt"),
        UserInfo(occupation_status="engineer"),
        UserInfo(type=IntentType.PROCEDURE_AUTH, visa_type="f2"),
    ])
    def test_output_is_always_complete(self, detail_dialog, user_info):
        result = detail_dialog.begin(user_info)
        assert result.completed is True
        assert result.user_info.visa_type
        assert result.user_info.work_type
        assert result.user_info.occupation_status
        assert result.user_info.is_complete()

    def test_empty_record_gets_defaults(self, detail_dialog):
        result = detail_dialog.begin(UserInfo())
        assert result.user_info.visa_type == "f1"
        assert result.user_info.work_type == "opt"
        assert result.user_info.occupation_status == "student"

    def test_existing_values_are_kept(self, detail_dialog):
        info = UserInfo(visa_type="f1", work_type="cpt")
        result = detail_dialog.begin(info)
        assert result.user_info.work_type == "cpt"
        assert result.user_info.occupation_status == "student"

    def test_record_is_mutated_in_place(self, detail_dialog):
        info = UserInfo()
        result = detail_dialog.begin(info)
        assert result.user_info is info
        assert info.visa_type == "f1"

    def test_running_twice_changes_nothing(self, detail_dialog):
        info = UserInfo(type=IntentType.ELIGIBILITY, visa_type="f1", work_type="cpt", occupation_status="ta")
        first = detail_dialog.begin(info).user_info.model_dump()
        second = detail_dialog.begin(info).user_info.model_dump()
        assert first == second == {
            "type": IntentType.ELIGIBILITY,
            "visa_type": "f1",
            "work_type": "cpt",
            "occupation_status": "ta",
        }


class TestPrompting:

    @pytest.fixture
    def dialog(self):
        return DetailCollectionDialog(prompt_for_missing=True)

    def test_asks_for_first_missing_field(self, dialog):
        result = dialog.begin(UserInfo())
        assert result.completed is False
        assert result.pending_step == CollectionStep.VISA_TYPE
        assert result.prompt == VISA_TYPE_PROMPT

    def test_skips_fields_already_known(self, dialog):
        result = dialog.begin(UserInfo(visa_type="f1"))
        assert result.pending_step == CollectionStep.WORK_TYPE
        assert result.prompt == WORK_TYPE_PROMPT

    def test_answers_fill_fields_in_order(self, dialog):
        info = UserInfo()
        result = dialog.begin(info)

        result = dialog.resume(info, result.pending_step, "F1")
        assert info.visa_type == "f1"
        assert result.pending_step == CollectionStep.WORK_TYPE

        result = dialog.resume(info, result.pending_step, "CPT")
        assert info.work_type == "cpt"
        assert result.pending_step == CollectionStep.OCCUPATION_STATUS
        assert result.prompt == OCCUPATION_STATUS_PROMPT

        result = dialog.resume(info, result.pending_step, "student")
        assert result.completed is True
        assert info.occupation_status == "student"

    def test_blank_answer_asks_again(self, dialog):
        info = UserInfo()
        result = dialog.resume(info, CollectionStep.VISA_TYPE, "   ")
        assert result.completed is False
        assert result.pending_step == CollectionStep.VISA_TYPE
        assert info.visa_type is None

    def test_complete_record_never_prompts(self, dialog):
        info = UserInfo(visa_type="f1", work_type="opt", occupation_status="student")
        result = dialog.begin(info)
        assert result.completed is True
        assert result.prompt is None
