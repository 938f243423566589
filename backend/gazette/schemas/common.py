from pydantic import BaseModel
from typing import List


class ActionResult(BaseModel):
    """Outcome of a state-changing request: what happened and where to go next."""

    message: str
    redirect: str
    warnings: List[str] = []
