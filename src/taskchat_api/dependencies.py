"""
Dependency wiring for the FastAPI app.

Stores are attached to ``app.state`` by ``create_app`` and handed to routes
through these providers, so tests can inject fakes at construction time.
"""

from __future__ import annotations

from fastapi import Request

from .stores import ChatStore, TaskStore


def get_task_store(request: Request) -> TaskStore:
    return request.app.state.task_store


def get_chat_store(request: Request) -> ChatStore:
    return request.app.state.chat_store
