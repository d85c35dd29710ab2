from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------
# DIALOGFLOW ES REQUEST
# ---------------------------------------------------------------------

class IntentInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    displayName: Optional[str] = None

    @field_validator("displayName", mode="before")
    @classmethod
    def v_name(cls, v):
        return v if isinstance(v, str) else None


class QueryResult(BaseModel):
    model_config = ConfigDict(extra="ignore")  # Dialogflow sends far more than we read

    intent: IntentInfo = Field(default_factory=IntentInfo)
    parameters: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("intent", mode="before")
    @classmethod
    def v_intent(cls, v):
        return v if isinstance(v, dict) else {}

    @field_validator("parameters", mode="before")
    @classmethod
    def v_params(cls, v):
        # null or a non-object bag is treated as empty
        return v if isinstance(v, dict) else {}


class WebhookRequest(BaseModel):
    """Inbound fulfillment call. Only the fields the webhook reads."""
    model_config = ConfigDict(extra="ignore")

    session: Optional[str] = None
    queryResult: QueryResult = Field(default_factory=QueryResult)

    @field_validator("session", mode="before")
    @classmethod
    def v_session(cls, v):
        return v if isinstance(v, str) else None

    @field_validator("queryResult", mode="before")
    @classmethod
    def v_query(cls, v):
        return v if isinstance(v, dict) else {}


# ---------------------------------------------------------------------
# DIALOGFLOW ES RESPONSE
# ---------------------------------------------------------------------

class TextSegment(BaseModel):
    text: List[str]


class FulfillmentMessage(BaseModel):
    text: TextSegment


class WebhookResponse(BaseModel):
    fulfillmentMessages: List[FulfillmentMessage]
