from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

import ai_flows


def _fake_anthropic(text: str) -> MagicMock:
    client = MagicMock()
    client.messages.create.return_value = SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)]
    )
    return client


DRAFT_ARGS = {
    "client_name": "Priya Raman",
    "case_details": "Landlord has withheld a security deposit of Rs. 50,000 for three months.",
    "document_type": "Legal Notice",
    "relevant_jurisdiction": "Chennai",
}


class TestStripFences:
    def test_plain_text_untouched(self):
        assert ai_flows._strip_fences("  Dear Sir,\nPay up.  ") == "Dear Sir,\nPay up."

    def test_language_tagged_fence(self):
        assert ai_flows._strip_fences("```markdown\n### LEGAL NOTICE\n```") == "### LEGAL NOTICE"

    def test_bare_fence(self):
        assert ai_flows._strip_fences("```\nhello\n```") == "hello"


class TestValidateDraftRequest:
    def test_valid_values_are_stripped(self):
        values = ai_flows.validate_draft_request("  Priya ", DRAFT_ARGS["case_details"], "Legal Notice", "Chennai ")
        assert values["client_name"] == "Priya"
        assert values["relevant_jurisdiction"] == "Chennai"

    def test_short_case_details(self):
        with pytest.raises(ValueError, match="case_details"):
            ai_flows.validate_draft_request("Priya", "too short", "Legal Notice", "Chennai")

    def test_every_missing_field_reported(self):
        with pytest.raises(ValueError) as excinfo:
            ai_flows.validate_draft_request("", DRAFT_ARGS["case_details"], " ", None)
        message = str(excinfo.value)
        assert "client_name" in message
        assert "document_type" in message
        assert "relevant_jurisdiction" in message


class TestGenerateLegalDraft:
    def test_prompt_contains_case_and_header(self):
        client = _fake_anthropic("### LEGAL NOTICE\n1. My Client ...")
        with patch("ai_flows.anthropic.Anthropic", return_value=client) as factory:
            draft = ai_flows.generate_legal_draft(
                **DRAFT_ARGS,
                api_key="test-key",
                header=ai_flows.firm_header("office@firm.test", "1 Main Rd", "Civil litigation"),
                today=date(2025, 3, 1),
            )

        assert draft == "### LEGAL NOTICE\n1. My Client ..."
        factory.assert_called_once_with(api_key="test-key")
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"] == ai_flows.DRAFT_SYSTEM_PROMPT
        prompt = kwargs["messages"][0]["content"]
        assert "Client Name: Priya Raman" in prompt
        assert "Relevant Jurisdiction: Chennai" in prompt
        assert "Email Id: office@firm.test" in prompt
        assert "01 March 2025" in prompt
        assert "### LEGAL NOTICE" in prompt

    def test_invalid_input_never_calls_model(self):
        with patch("ai_flows.anthropic.Anthropic") as factory:
            with pytest.raises(ValueError):
                ai_flows.generate_legal_draft(
                    client_name="", case_details="x", document_type="", relevant_jurisdiction="",
                    api_key="test-key",
                )
        factory.assert_not_called()

    def test_empty_model_output_is_an_error(self):
        with patch("ai_flows.anthropic.Anthropic", return_value=_fake_anthropic("   ")):
            with pytest.raises(ValueError, match="Failed to generate legal draft"):
                ai_flows.generate_legal_draft(**DRAFT_ARGS, api_key="test-key")


class TestTranslate:
    def test_translation(self):
        client = _fake_anthropic("My salary has not been paid.")
        with patch("ai_flows.anthropic.Anthropic", return_value=client):
            result = ai_flows.translate_text("என் சம்பளம் வழங்கப்படவில்லை.", api_key="test-key")
        assert result == "My salary has not been paid."
        prompt = client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert prompt.startswith("Translate the following text to English.")

    def test_blank_text_skips_model(self):
        with patch("ai_flows.anthropic.Anthropic") as factory:
            assert ai_flows.translate_text("  ", api_key="test-key") == ""
        factory.assert_not_called()

    def test_no_text_blocks_gives_empty_string(self):
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(content=[])
        with patch("ai_flows.anthropic.Anthropic", return_value=client):
            assert ai_flows.translate_text("Bonjour", api_key="test-key", target_language="English") == ""


class TestSummary:
    def test_summary_prompt_names_language(self):
        client = _fake_anthropic("Caller reports unpaid wages for two months.")
        with patch("ai_flows.anthropic.Anthropic", return_value=client):
            summary = ai_flows.generate_transcript_summary(
                "User: two months no salary", language="tamil", api_key="test-key"
            )
        assert summary == "Caller reports unpaid wages for two months."
        kwargs = client.messages.create.call_args.kwargs
        assert "The transcript is in tamil." in kwargs["messages"][0]["content"]
        assert kwargs["system"] == ai_flows.SUMMARY_SYSTEM_PROMPT

    def test_empty_transcript(self):
        with patch("ai_flows.anthropic.Anthropic") as factory:
            assert ai_flows.generate_transcript_summary("", language="tamil", api_key="test-key") == ""
        factory.assert_not_called()
