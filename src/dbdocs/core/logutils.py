"""Helpers for logging values that originate from the database catalog."""

from __future__ import annotations


def sanitize_for_log(value: object) -> str:
    """
    Make a catalog value safe to embed in a single log line.

    Carriage returns are dropped and line feeds become spaces, so that
    object names cannot forge extra log records.
    """
    if value is None:
        return "None"
    return str(value).replace("\r", "").replace("\n", " ")
