# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTML page rendering with optional flash messages.

Rendering only produces markup; whether a handler redirects or renders is
decided by the route.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"

FLASH_STYLES = {"inline", "alert"}

_ENV = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    auto_reload=True,
)


@dataclass(frozen=True)
class Flash:
    text: str
    color: str = "red"
    # Only used by the alert style: where to send the browser after the popup.
    redirect_to: Optional[str] = None


def flash_style() -> str:
    style = os.getenv("DONORS_FLASH_STYLE", "alert").strip().lower()
    return style if style in FLASH_STYLES else "alert"


def _inline_html(flash: Flash) -> Markup:
    return Markup('<span class="text-{}-500 font-semibold">{}</span>').format(flash.color, flash.text)


def _alert_script(flash: Flash) -> str:
    # json.dumps gives a valid JS string literal; "</" is split so the text cannot close the tag.
    js = f"alert({json.dumps(flash.text)});"
    if flash.redirect_to:
        js += f" window.location.href = {json.dumps(flash.redirect_to)};"
    return "<script>" + js.replace("</", "<\\/") + "</script>"


def inject_before_body_end(html: str, snippet: str) -> str:
    idx = html.lower().rfind("</body>")
    if idx == -1:
        return html + snippet
    return html[:idx] + snippet + html[idx:]


def render_page(template_name: str, flash: Optional[Flash] = None, *, style: Optional[str] = None) -> str:
    style = style or flash_style()
    message = _inline_html(flash) if (flash and style == "inline") else Markup("")
    html = _ENV.get_template(template_name).render(message=message)
    if flash and style == "alert":
        html = inject_before_body_end(html, _alert_script(flash))
    return html


def not_logged_in_page() -> str:
    return _ENV.get_template("not_logged_in.html").render()
