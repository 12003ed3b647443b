"""Tests for the knowledge base loader."""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from handyman_assistant.config import DEFAULT_KNOWLEDGE_BASE_PATH
from handyman_assistant.knowledge import DEFAULT_KNOWLEDGE, KnowledgeRecord, load_knowledge


def _write(tmp_path, content: str):
    path = tmp_path / "knowledge-base.json"
    path.write_text(content, encoding="utf-8")
    return path


class TestShippedKnowledgeBase:
    def test_repository_file_loads(self):
        kb = load_knowledge(DEFAULT_KNOWLEDGE_BASE_PATH)
        assert kb is not DEFAULT_KNOWLEDGE
        assert kb.business_name == "Handyman of Fairfax"
        assert "Springfield" in kb.service_area
        assert kb.contact_phone

    def test_short_faq_keys_are_read(self):
        kb = load_knowledge(DEFAULT_KNOWLEDGE_BASE_PATH)
        assert len(kb.faqs) > 0
        assert all(faq.question and faq.answer for faq in kb.faqs)


class TestFallbacks:
    def test_missing_file_returns_default(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            kb = load_knowledge(tmp_path / "nope.json")
        assert kb is DEFAULT_KNOWLEDGE
        assert "not found" in caplog.text

    def test_invalid_json_returns_default(self, tmp_path, caplog):
        path = _write(tmp_path, "{not json")
        with caplog.at_level(logging.WARNING):
            kb = load_knowledge(path)
        assert kb is DEFAULT_KNOWLEDGE
        assert "built-in defaults" in caplog.text

    def test_deeply_nested_json_returns_default(self, tmp_path):
        path = _write(tmp_path, "[" * 100_000 + "]" * 100_000)
        assert load_knowledge(path) is DEFAULT_KNOWLEDGE

    def test_non_object_json_returns_default(self, tmp_path):
        path = _write(tmp_path, '["a", "b"]')
        assert load_knowledge(path) is DEFAULT_KNOWLEDGE

    def test_wrong_field_types_return_default(self, tmp_path):
        path = _write(tmp_path, json.dumps({"services": {"not": "a list"}}))
        assert load_knowledge(path) is DEFAULT_KNOWLEDGE

    def test_default_record_has_contact_phone(self):
        assert DEFAULT_KNOWLEDGE.contact_phone
        assert DEFAULT_KNOWLEDGE.business_name


class TestFieldDefaults:
    def test_absent_fields_default_to_empty(self, tmp_path):
        path = _write(tmp_path, json.dumps({"business_name": "Bob's Repairs"}))
        kb = load_knowledge(path)
        assert kb.business_name == "Bob's Repairs"
        assert kb.location == ""
        assert kb.service_area == ()
        assert kb.faqs == ()

    def test_null_fields_are_never_none(self, tmp_path):
        payload = {
            "business_name": None,
            "hours": None,
            "services": None,
            "faqs": [{"q": "Weekends?", "a": None}],
        }
        kb = load_knowledge(_write(tmp_path, json.dumps(payload)))
        assert kb.business_name == ""
        assert kb.hours == ""
        assert kb.services == ()
        assert kb.faqs[0].question == "Weekends?"
        assert kb.faqs[0].answer == ""

    def test_long_and_short_faq_keys(self):
        kb = KnowledgeRecord.model_validate(
            {
                "faqs": [
                    {"question": "Long?", "answer": "Yes."},
                    {"q": "Short?", "a": "Also yes."},
                ]
            }
        )
        assert [f.question for f in kb.faqs] == ["Long?", "Short?"]
        assert [f.answer for f in kb.faqs] == ["Yes.", "Also yes."]

    def test_sequences_cannot_be_mutated(self, knowledge):
        assert isinstance(knowledge.services, tuple)
        assert isinstance(knowledge.faqs, tuple)
        with pytest.raises(AttributeError):
            knowledge.services.append("Roofing")
        assert "Roofing" not in knowledge.services

    def test_record_fields_cannot_be_reassigned(self, knowledge):
        with pytest.raises(ValidationError):
            knowledge.services = ("Roofing",)

    def test_unknown_keys_are_ignored(self):
        kb = KnowledgeRecord.model_validate({"business_name": "X", "owner": "Sam"})
        assert kb.business_name == "X"
