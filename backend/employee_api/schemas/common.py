from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class APIModel(BaseModel):
    """
    Common base for request schemas:
    - forbid unknown keys (prevents silent typos in payloads)
    - keep things predictable across endpoints
    """

    model_config = ConfigDict(extra="forbid")


class UpstreamModel(BaseModel):
    """
    Base for models parsed from the upstream service.

    Unknown keys are ignored so additive upstream changes don't break parsing.
    Instances are immutable.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)


def _strip_or_none(v: object) -> object:
    if v is None:
        return None
    if isinstance(v, str):
        s = v.strip()
        return s
    return v
