"""One-shot notices stored in the signed session cookie until the next read."""

from typing import Dict, List
from starlette.requests import Request

SESSION_KEY = "_flashes"

SUCCESS = "success"
WARNING = "warning"
DANGER = "danger"


def flash(request: Request, category: str, message: str) -> None:
    if "session" not in request.scope:
        return
    flashes = list(request.session.get(SESSION_KEY, []))
    flashes.append({"category": category, "message": message})
    request.session[SESSION_KEY] = flashes


def pop_flashes(request: Request) -> List[Dict[str, str]]:
    if "session" not in request.scope:
        return []
    return request.session.pop(SESSION_KEY, [])
