"""
Unit tests for schema validation of LLM replies.

Tests:
- JSON Schema validation of quiz, check-in and plan replies
- Auto-repair (unknown keys, whitespace, numeric strings, wrapped arrays)
- ValidationResult behaviour
"""

import pytest

from flowspace.utils.validation import (
    PlanValidator,
    QuizValidator,
    ValidationResult,
    validate_checkin,
    validate_plan,
    validate_quiz,
)


class TestValidationResult:
    """Test suite for ValidationResult class."""

    def test_valid_result_is_truthy(self):
        assert bool(ValidationResult(valid=True, errors=[])) is True

    def test_invalid_result_is_falsy(self):
        assert bool(ValidationResult(valid=False, errors=["error"])) is False

    def test_str_representation_invalid(self):
        result = ValidationResult(valid=False, errors=["error1", "error2"])
        assert "✗" in str(result)
        assert "2" in str(result)
        assert "error1" in str(result)

    def test_str_representation_with_repairs(self):
        result = ValidationResult(valid=True, errors=[], repairs=["r1"])
        assert "1 repair" in str(result)


class TestQuizValidation:
    """Test suite for quiz reply validation."""

    def test_valid_quiz(self, sample_quiz):
        result = validate_quiz(sample_quiz, auto_repair=False)
        assert result.valid
        assert result.data == sample_quiz
        assert result.repairs == []

    def test_object_is_not_a_quiz(self):
        result = validate_quiz({"q": "What?", "a": "That"}, auto_repair=False)
        assert not result.valid
        assert any("array" in err for err in result.errors)

    def test_empty_list_is_a_quiz(self):
        result = validate_quiz([], auto_repair=False)
        assert result.valid
        assert result.data == []

    def test_repair_converts_scalar_answers(self):
        result = validate_quiz(
            [{"q": "What is 6 x 7?", "a": 42}, {"q": "Is water wet?", "a": True}, {"q": 3.5, "a": "x"}]
        )
        assert result.valid
        assert result.data == [
            {"q": "What is 6 x 7?", "a": "42"},
            {"q": "Is water wet?", "a": "true"},
            {"q": "3.5", "a": "x"},
        ]
        assert any("Converted" in r for r in result.repairs)

    def test_null_answer_still_rejected(self):
        assert not validate_quiz([{"q": "Q?", "a": None}]).valid

    def test_missing_answer_rejected(self):
        result = validate_quiz([{"q": "What is ATP?"}])
        assert not result.valid
        assert any("'a' is a required property" in err for err in result.errors)

    def test_repair_unwraps_questions_key(self, sample_quiz):
        result = validate_quiz({"questions": sample_quiz})
        assert result.valid
        assert result.data == sample_quiz
        assert any("Unwrapped" in r for r in result.repairs)

    def test_repair_strips_unknown_keys(self):
        result = validate_quiz([{"q": "Q?", "a": "A", "difficulty": "chill"}])
        assert result.valid
        assert result.data == [{"q": "Q?", "a": "A"}]
        assert any("difficulty" in r for r in result.repairs)

    def test_repair_does_not_mutate_input(self):
        original = [{"q": "  Q?  ", "a": "A", "extra": 1}]
        validate_quiz(original)
        assert original == [{"q": "  Q?  ", "a": "A", "extra": 1}]

    def test_validator_loads_schema_from_config(self):
        validator = QuizValidator()
        assert validator.schema_path.name == "quiz.schema.json"
        assert validator.schema["type"] == "array"


class TestCheckInValidation:
    def test_valid_checkin(self, sample_checkin):
        assert validate_checkin(sample_checkin).valid

    @pytest.mark.parametrize("missing", ["validation", "tiny_step", "reminder"])
    def test_missing_field(self, sample_checkin, missing):
        sample_checkin.pop(missing)
        result = validate_checkin(sample_checkin)
        assert not result.valid
        assert any(missing in err for err in result.errors)


class TestPlanValidation:
    def test_valid_plan(self, sample_plan):
        assert validate_plan(sample_plan).valid

    def test_empty_buckets_allowed(self, sample_plan):
        sample_plan["if_time"] = []
        assert validate_plan(sample_plan).valid

    def test_missing_summary(self, sample_plan):
        del sample_plan["summary"]
        assert not validate_plan(sample_plan).valid

    def test_empty_summary(self, sample_plan):
        sample_plan["summary"] = ""
        assert not validate_plan(sample_plan).valid

    def test_repair_coerces_minutes(self, sample_plan):
        sample_plan["do_first"][0]["minutes"] = "20"
        sample_plan["do_next"][0]["minutes"] = "12.5"

        result = PlanValidator().validate(sample_plan, auto_repair=True)

        assert result.valid
        assert result.data["do_first"][0]["minutes"] == 20
        assert result.data["do_next"][0]["minutes"] == 12.5
        assert any("Coerced" in r for r in result.repairs)

    @pytest.mark.parametrize("minutes", ["10-15", "about twenty", "", "inf"])
    def test_unparseable_minutes_become_null(self, sample_plan, minutes):
        sample_plan["do_first"][0]["minutes"] = minutes

        result = validate_plan(sample_plan)

        assert result.valid
        item = result.data["do_first"][0]
        assert item["minutes"] is None
        assert item["task"] == "Read chapter 3 intro"
        assert item["reason"] == "A small, easy start"

    @pytest.mark.parametrize("minutes", [-10, "-10"])
    def test_negative_minutes_become_null(self, sample_plan, minutes):
        sample_plan["do_next"][0]["minutes"] = minutes

        result = validate_plan(sample_plan)

        assert result.valid
        assert result.data["do_next"][0]["minutes"] is None

    def test_non_string_task_converted(self, sample_plan):
        sample_plan["if_time"][0]["task"] = 7
        assert validate_plan(sample_plan).data["if_time"][0]["task"] == "7"

    def test_repair_trims_and_strips_in_nested_items(self, sample_plan):
        sample_plan["do_next"][0]["priority"] = "high"
        sample_plan["summary"] = "  Be gentle.  "

        result = validate_plan(sample_plan)

        assert result.valid
        assert "priority" not in result.data["do_next"][0]
        assert result.data["summary"] == "Be gentle."
