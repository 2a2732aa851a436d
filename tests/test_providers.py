from importlib import reload

import pytest


def _reload_providers():
    import linguist.config
    import linguist.logging
    import linguist.providers
    import linguist.providers.llm

    reload(linguist.config)
    reload(linguist.logging)
    reload(linguist.providers)
    reload(linguist.providers.llm)
    return linguist.providers


def test_local_provider_returns_empty_outputs(monkeypatch):
    monkeypatch.setenv("STRICT_MODE", "false")
    monkeypatch.setenv("LLM_PROVIDER", "local")
    providers = _reload_providers()

    llm = providers.get_llm_provider()
    assert llm is not None
    assert llm.complete("ping") == ""
    assert llm.synthesize("hello") == b""
    assert llm.transcribe(b"...") == ""
    # singleton within the process
    assert providers.get_llm_provider() is llm
    providers.shutdown_providers()


def test_missing_api_key_falls_back_when_not_strict(monkeypatch):
    monkeypatch.setenv("STRICT_MODE", "false")
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    providers = _reload_providers()

    llm = providers.get_llm_provider()
    assert llm.name == "local"
    providers.shutdown_providers()


def test_strict_mode_rejects_missing_api_key(monkeypatch):
    monkeypatch.setenv("STRICT_MODE", "true")
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    providers = _reload_providers()

    with pytest.raises(RuntimeError):
        providers.get_llm_provider()


def test_policy_retries_then_raises_in_strict_mode(monkeypatch):
    monkeypatch.setenv("STRICT_MODE", "true")
    monkeypatch.setenv("LLM_MAX_RETRIES", "2")
    monkeypatch.setenv("LLM_TIMEOUT_MS", "2000")
    providers = _reload_providers()
    from linguist.providers.llm import _LLMBase, _PolicyLLM

    calls = []

    class Flaky(_LLMBase):
        name = "flaky"

        def complete(self, prompt, *, image=None, json_mode=False):
            calls.append(prompt)
            raise TimeoutError("upstream timeout")

    with pytest.raises(RuntimeError) as excinfo:
        _PolicyLLM(Flaky()).complete("ping")
    assert len(calls) == 2
    assert "reason_code=TIMEOUT" in str(excinfo.value)
    providers.shutdown_providers()


def test_shutdown_keeps_executor_usable(monkeypatch):
    monkeypatch.setenv("STRICT_MODE", "false")
    monkeypatch.setenv("LLM_PROVIDER", "local")
    providers = _reload_providers()

    providers.get_llm_provider()
    providers.shutdown_providers()
    assert providers.get_llm_provider().complete("again") == ""
    providers.shutdown_providers()
