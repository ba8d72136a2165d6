from __future__ import annotations

import pytest

from docshell.options import CustomAccount, DefaultAccount, Disabled, DocumentOptions
from docshell.scripts import (
    VWO_LOADER_ASSET,
    ScriptInjector,
    env_script,
    optimizer_scripts,
    serialize_env,
)


def test_env_script_shape() -> None:
    assert env_script({"NODE_ENV": "production"}).content == 'window.process={env:{"NODE_ENV":"production"}};'
    assert env_script(None).content == "window.process={env:{}};"


def test_serialize_env_is_compact_and_keeps_unicode() -> None:
    assert serialize_env({"a": [1, 2], "b": {"c": None}}) == '{"a":[1,2],"b":{"c":null}}'
    assert serialize_env({"city": "Zürich"}) == '{"city":"Zürich"}'


def test_serialize_env_escapes_every_angle_bracket() -> None:
    assert serialize_env({"x": "</script>"}) == '{"x":"\\u003c/script>"}'
    assert serialize_env({"x": "<!--<script>"}) == '{"x":"\\u003c!--\\u003cscript>"}'


def test_serialize_env_rejects_unserializable_values() -> None:
    with pytest.raises(TypeError):
        serialize_env({"x": object()})


def test_optimizer_scripts_disabled() -> None:
    assert optimizer_scripts(Disabled()) == []


def test_optimizer_scripts_order_and_account() -> None:
    account, loader, ready = optimizer_scripts(CustomAccount(987654))

    assert account.content.startswith("var _vis_opt_account_id = 987654;")
    assert VWO_LOADER_ASSET in loader.content
    assert "vwo_$(document).ready" in ready.content


def test_optimizer_scripts_default_account() -> None:
    account = optimizer_scripts(DefaultAccount())[0]

    assert "215379" in account.content


def test_injector_env_script_always_first() -> None:
    scripts = ScriptInjector(DocumentOptions(visual_website_optimizer=True)).scripts()

    assert [script.name for script in scripts] == ["env", "vwo-account", "vwo-loader", "vwo-ready"]


def test_injector_without_optimizer_emits_only_env() -> None:
    scripts = ScriptInjector(DocumentOptions(visual_website_optimizer=False)).scripts()

    assert [script.name for script in scripts] == ["env"]
