"""Pydantic schemas for the chat client HTTP adapter."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .connectors import Connector
from .constants import ModelCategory, ModelTier, RequestState, Sender
from .model_registry import Model
from .session_log import Turn
from .state import UiState


class ModelMetadata(BaseModel):
    id: str
    display_name: str = Field(serialization_alias="displayName")
    category: ModelCategory
    tier: ModelTier

    @classmethod
    def from_model(cls, model: Model) -> "ModelMetadata":
        return cls(
            id=model.id,
            display_name=model.display_name,
            category=model.category,
            tier=model.tier,
        )


class ModelGroup(BaseModel):
    category: ModelCategory
    models: list[ModelMetadata]


class ConnectorMetadata(BaseModel):
    id: str
    display_name: str = Field(serialization_alias="displayName")
    active: bool

    @classmethod
    def from_connector(cls, connector: Connector) -> "ConnectorMetadata":
        return cls(id=connector.id, display_name=connector.display_name, active=connector.active)


class TurnPayload(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: int
    text: str
    sender: Sender
    model_id: str = Field(serialization_alias="modelId")
    model_display_name: str = Field(serialization_alias="modelDisplayName")
    created_at: datetime = Field(serialization_alias="createdAt")
    correlation_id: int = Field(serialization_alias="correlationId")
    failed: bool = False
    error: str | None = None

    @classmethod
    def from_turn(cls, turn: Turn, model_display_name: str) -> "TurnPayload":
        return cls(
            id=turn.id,
            text=turn.text,
            sender=turn.sender,
            model_id=turn.model_id,
            model_display_name=model_display_name,
            created_at=turn.created_at,
            correlation_id=turn.correlation_id,
            failed=turn.failed,
            error=turn.error,
        )


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    text: str = Field(max_length=32_000)
    model_id: str | None = Field(default=None, alias="modelId")


class SendMessageResponse(BaseModel):
    turn: TurnPayload
    reply: TurnPayload | None = None
    state: RequestState | None = None


class CancelResponse(BaseModel):
    cancelled: bool


class SelectModelRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_id: str = Field(alias="modelId")

    @field_validator("model_id")
    @classmethod
    def validate_model_id(cls, model_id: str) -> str:
        if not model_id.strip():
            raise ValueError("modelId must not be blank")
        return model_id


class UiStatePayload(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    selected_model_id: str = Field(serialization_alias="selectedModelId")
    selected_model_display_name: str = Field(serialization_alias="selectedModelDisplayName")
    dark_mode: bool = Field(serialization_alias="darkMode")
    history_open: bool = Field(serialization_alias="historyOpen")
    settings_open: bool = Field(serialization_alias="settingsOpen")
    model_dropdown_open: bool = Field(serialization_alias="modelDropdownOpen")

    @classmethod
    def from_state(cls, state: UiState, selected_model_display_name: str) -> "UiStatePayload":
        return cls(
            selected_model_id=state.selected_model_id,
            selected_model_display_name=selected_model_display_name,
            dark_mode=state.dark_mode,
            history_open=state.history_open,
            settings_open=state.settings_open,
            model_dropdown_open=state.model_dropdown_open,
        )
