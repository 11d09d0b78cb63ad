"""Questionary / prompt_toolkit theme for dbdocs.

Questionary uses prompt_toolkit under the hood. This module defines the
central styles so all interactive prompts (schema picker, password) look
consistent.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

QUESTIONARY_STYLE_SELECT = Style.from_dict(
    {
        "question": "bold ansibrightcyan",
        "answer": "bold ansibrightgreen",
        "pointer": "bold ansibrightgreen",
        "highlighted": "bold ansibrightgreen",
        "selected": "bold ansibrightgreen",
        "checkbox": "ansibrightblack",
        "checkbox-selected": "bold ansibrightgreen",
        "separator": "ansibrightblack",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
        "disabled": "ansibrightblack",
    }
)

QUESTIONARY_STYLE_INPUT = Style.from_dict(
    {
        "question": "bold ansibrightcyan",
        "answer": "bold ansibrightcyan",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
    }
)
