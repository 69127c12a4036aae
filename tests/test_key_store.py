from __future__ import annotations

import json
import stat

from aiscriptwriter.keys.store import ApiKeySet, KeyStore, mask
from aiscriptwriter.script_engine.model import Provider


def test_save_uses_fixed_key_names(tmp_path):
    store = KeyStore(tmp_path / "keys.json", use_env=False)

    store.save(Provider.GOOGLE, "g-secret")
    store.save("grok", "xai-secret")

    stored = json.loads((tmp_path / "keys.json").read_text(encoding="utf-8"))
    assert stored == {"googleApiKey": "g-secret", "grokApiKey": "xai-secret"}
    assert stat.S_IMODE((tmp_path / "keys.json").stat().st_mode) == 0o600


def test_load_round_trip_and_clear(tmp_path):
    store = KeyStore(tmp_path / "keys.json", use_env=False)
    store.save(Provider.OPENAI, "sk-1")

    keys = store.load()
    assert keys.for_provider(Provider.OPENAI) == "sk-1"
    assert keys.for_provider(Provider.DEEPSEEK) is None

    keys = store.clear(Provider.OPENAI)
    assert keys.for_provider(Provider.OPENAI) is None


def test_missing_or_corrupt_file_loads_empty(tmp_path):
    assert KeyStore(tmp_path / "absent.json", use_env=False).load().configured() == []

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    assert KeyStore(corrupt, use_env=False).load().configured() == []


def test_environment_fills_gaps_but_stored_keys_win(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("DEEPSEEK_API_KEY", "ds-env")
    store = KeyStore(tmp_path / "keys.json")
    store.save(Provider.OPENAI, "sk-stored")

    keys = store.load()

    assert keys.for_provider(Provider.OPENAI) == "sk-stored"
    assert keys.for_provider(Provider.DEEPSEEK) == "ds-env"


def test_blank_keys_count_as_missing():
    keys = ApiKeySet(keys={Provider.GOOGLE: "   "})
    assert keys.for_provider("google") is None
    assert keys.with_key("google", "g").for_provider(Provider.GOOGLE) == "g"
    assert keys.for_provider(Provider.GOOGLE) is None


def test_mask_hides_secret():
    assert mask(None) == "(not set)"
    assert mask("short") == "*****"
    assert mask("sk-1234567890abcd") == "sk-1…abcd"
