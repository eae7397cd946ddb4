"""Request-scoped access to the engine owned by the application."""

from __future__ import annotations

from fastapi import Request

from ai_learning.engine import PreferenceEngine


def get_engine(request: Request) -> PreferenceEngine:
    return request.app.state.engine
