import json
from types import SimpleNamespace

import llm


class FakeClient:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def test_no_api_key_uses_fallback(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    assert llm._client() is None
    assert llm.suggest_meal_swaps("Breakfast: Eggs") == llm._safe_fallback()


def test_valid_reply_trimmed_to_three(monkeypatch):
    fake = FakeClient(json.dumps(["a", "b", "c", "d"]))
    monkeypatch.setattr(llm, "_client", lambda: fake)
    assert llm.suggest_meal_swaps("Breakfast: Eggs", ["diabetes"]) == ["a", "b", "c"]
    prompt = fake.calls[0]["messages"][0]["content"]
    assert "health goals: diabetes." in prompt
    assert "meal plan: Breakfast: Eggs" in prompt
    assert "medication" in prompt


def test_bad_shape_uses_fallback(monkeypatch):
    monkeypatch.setattr(llm, "_client", lambda: FakeClient(json.dumps(["only one"])))
    assert llm.suggest_meal_swaps("Lunch: Salad") == llm._safe_fallback()


def test_unparseable_reply_uses_fallback(monkeypatch):
    monkeypatch.setattr(llm, "_client", lambda: FakeClient("Sure! Here are some ideas..."))
    assert llm.suggest_meal_swaps("Lunch: Salad") == llm._safe_fallback()


def test_request_error_uses_fallback(monkeypatch):
    monkeypatch.setattr(llm, "_client", lambda: FakeClient(error=RuntimeError("rate limited")))
    assert llm.suggest_meal_swaps("Lunch: Salad") == llm._safe_fallback()


def test_blank_entries_use_fallback(monkeypatch):
    monkeypatch.setattr(llm, "_client", lambda: FakeClient(json.dumps(["a", " ", "c"])))
    assert llm.suggest_meal_swaps("Lunch: Salad") == llm._safe_fallback()


def test_fallback_is_a_fresh_list():
    llm._safe_fallback().clear()
    assert len(llm._safe_fallback()) == 3
