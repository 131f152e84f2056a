"""One-shot notices carried across a redirect in the session cookie."""

from __future__ import annotations

from typing import Dict, List

from starlette.requests import Request

FLASH_KEY = "_flash"


def flash(request: Request, kind: str, message: str) -> None:
    messages = list(request.session.get(FLASH_KEY) or [])
    messages.append({"kind": kind, "message": message})
    request.session[FLASH_KEY] = messages


def pop_flashes(request: Request) -> List[Dict[str, str]]:
    return list(request.session.pop(FLASH_KEY, None) or [])


__all__ = ["FLASH_KEY", "flash", "pop_flashes"]
