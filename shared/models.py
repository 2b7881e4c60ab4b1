"""Pydantic data models shared across the gateway and the generation layer.

Field names follow Python conventions; the camelCase names the client
application sends and receives (``manualText``, ``userQuery``, ``apiKey``)
are declared as aliases so both spellings validate.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class QueryRequest(BaseModel):
    """Inbound manual question.

    Both fields are optional at the schema level so that a missing value is
    reported as an ``invalid-argument`` result by the orchestrator rather
    than a framework validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    manual_text: Optional[str] = Field(default=None, alias="manualText")
    user_query: Optional[str] = Field(default=None, alias="userQuery")


class FormattedAnswer(BaseModel):
    """Answer split into a one-sentence summary and an optional explanation.

    ``detailed`` is ``None`` (and omitted on the wire) when the model gave no
    explanation; it is never an empty string.
    """

    short: str
    detailed: Optional[str] = None

    def to_wire(self) -> Dict[str, str]:
        return self.model_dump(exclude_none=True)


class AISettings(BaseModel):
    """Contents of the Firestore settings document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_key: str = Field(default="", alias="apiKey")
    model: Optional[str] = None


class Principal(BaseModel):
    """Authenticated caller, as decoded from an ID token or session cookie."""

    uid: str
    email: Optional[str] = None
    claims: Dict[str, Any] = Field(default_factory=dict)


class ErrorKind(str, Enum):
    """Failure classification, named after the callable-protocol codes."""

    UNAUTHENTICATED = "unauthenticated"
    INVALID_ARGUMENT = "invalid-argument"
    FAILED_PRECONDITION = "failed-precondition"
    INTERNAL = "internal"

    @property
    def wire_status(self) -> str:
        return self.value.upper().replace("-", "_")

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.FAILED_PRECONDITION: 400,
    ErrorKind.INTERNAL: 500,
}

# Caller-visible text per kind; collaborator detail is only ever logged.
ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.UNAUTHENTICATED: "The function must be called while authenticated.",
    ErrorKind.INVALID_ARGUMENT: "Missing required parameters.",
    ErrorKind.FAILED_PRECONDITION: (
        "The application is not configured correctly. "
        "Check the API key and model in the settings document."
    ),
    ErrorKind.INTERNAL: "An error occurred while querying the AI service.",
}


class QuerySuccess(BaseModel):
    status: Literal["ok"] = "ok"
    answer: FormattedAnswer


class QueryFailure(BaseModel):
    status: Literal["error"] = "error"
    kind: ErrorKind
    message: str

    @classmethod
    def of(cls, kind: ErrorKind) -> "QueryFailure":
        return cls(kind=kind, message=ERROR_MESSAGES[kind])


QueryResult = Union[QuerySuccess, QueryFailure]


class SessionLoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SessionAck(BaseModel):
    status: str = "success"
