"""Inline bootstrap scripts injected at the top of the document body."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .options import CustomAccount, DefaultAccount, Disabled, DocumentOptions, OptimizerMode

logger = logging.getLogger(__name__)

VWO_LOADER_ASSET = "d5phz18u4wuww.cloudfront.net/vis_opt.js"

_VWO_SETTINGS_REQUEST = (
    "var _vis_opt_protocol = (('https:' == document.location.protocol) ? 'https://' : 'http://');\n"
    "document.write('<s' + 'cript src=\"' + _vis_opt_protocol + "
    "'dev.visualwebsiteoptimizer.com/deploy/js_visitor_settings.php?v=1&a='+_vis_opt_account_id"
    "+'&url='+encodeURIComponent(document.URL)+'&random='+Math.random()"
    "+'\" type=\"text/javascript\">' + '<\\/s' + 'cript>');"
)

_VWO_LOADER = (
    'if(typeof(_vis_opt_settings_loaded) == "boolean") { '
    "document.write('<s' + 'cript src=\"' + _vis_opt_protocol + "
    f"'{VWO_LOADER_ASSET}\" type=\"text/javascript\">' + '<\\/s' + 'cript>'); }}"
)

_VWO_READY = (
    'if(typeof(_vis_opt_settings_loaded) == "boolean" && typeof(_vis_opt_top_initialize) == "function") { '
    "_vis_opt_top_initialize(); "
    "vwo_$(document).ready(function() { _vis_opt_bottom_initialize(); }); }"
)


@dataclass(frozen=True, slots=True)
class InlineScript:
    """Body of an inline ``<script>`` element."""

    name: str
    content: str


def serialize_env(env: Mapping[str, Any]) -> str:
    """Serialize ``env`` to compact JSON safe for an inline script element."""
    payload = json.dumps(dict(env), separators=(",", ":"), ensure_ascii=False)
    # No raw "<" so "</script>" and "<!--" cannot change how the element is tokenized.
    return payload.replace("<", "\\u003c")


def env_script(env: Mapping[str, Any] | None) -> InlineScript:
    payload = serialize_env(env or {})
    return InlineScript(name="env", content=f"window.process={{env:{payload}}};")


def optimizer_scripts(mode: OptimizerMode) -> list[InlineScript]:
    """Return the Visual Website Optimizer snippet for ``mode``, if any."""
    if isinstance(mode, Disabled):
        return []
    if not isinstance(mode, (DefaultAccount, CustomAccount)):
        raise TypeError(f"Unknown optimizer mode: {mode!r}")
    account_line = f"var _vis_opt_account_id = {mode.account_id};\n"
    return [
        InlineScript(name="vwo-account", content=account_line + _VWO_SETTINGS_REQUEST),
        InlineScript(name="vwo-loader", content=_VWO_LOADER),
        InlineScript(name="vwo-ready", content=_VWO_READY),
    ]


class ScriptInjector:
    """Decide which inline scripts a document carries, in emission order."""

    def __init__(self, options: DocumentOptions) -> None:
        self._options = options

    def scripts(self) -> list[InlineScript]:
        mode = self._options.optimizer
        logger.debug("Resolved optimizer mode: %s", mode)
        return [env_script(self._options.env), *optimizer_scripts(mode)]
