"""Static model catalog."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .constants import DEFAULT_MODEL, ModelCategory, ModelTier
from .errors import ModelNotFoundError


@dataclass(frozen=True)
class Model:
    id: str
    display_name: str
    category: ModelCategory
    tier: ModelTier


class ModelCatalog:
    """Read-only registry of models, grouped by category in registration order."""

    def __init__(self, models: Iterable[Model], default_model_id: str = DEFAULT_MODEL) -> None:
        self._models: dict[str, Model] = {}
        for model in models:
            if model.id in self._models:
                raise ValueError(f"Duplicate model id: {model.id}")
            self._models[model.id] = model

        if default_model_id not in self._models:
            raise ValueError(f"Default model is not registered: {default_model_id}")
        self._default_model_id = default_model_id

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

    def __iter__(self) -> Iterator[Model]:
        return iter(self._models.values())

    def __len__(self) -> int:
        return len(self._models)

    @property
    def default_model_id(self) -> str:
        return self._default_model_id

    @property
    def default_model(self) -> Model:
        return self._models[self._default_model_id]

    def resolve(self, model_id: str) -> Model:
        try:
            return self._models[model_id]
        except KeyError:
            raise ModelNotFoundError(model_id) from None

    def models(self) -> tuple[Model, ...]:
        return tuple(self._models.values())

    def list_by_category(self, category: ModelCategory) -> tuple[Model, ...]:
        return tuple(model for model in self._models.values() if model.category == category)

    def categories(self) -> tuple[ModelCategory, ...]:
        seen: dict[ModelCategory, None] = {}
        for model in self._models.values():
            seen.setdefault(model.category, None)
        return tuple(seen)

    def display_name(self, model_id: str) -> str:
        """Return the model's display name, falling back to the default model's."""
        model = self._models.get(model_id)
        if model is None:
            return self.default_model.display_name
        return model.display_name


DEFAULT_MODELS: tuple[Model, ...] = (
    # --- Code models ---
    Model("claude-4-opus-code", "Claude 4 Opus Code", category="code", tier="premium"),
    Model("claude-4-sonnet-code", "Claude 4 Sonnet Code", category="code", tier="standard"),
    Model("gpt-4-turbo-code", "GPT-4 Turbo Code", category="code", tier="premium"),
    # --- Chat models ---
    Model("claude-4-sonnet", "Claude 4 Sonnet", category="chat", tier="standard"),
    Model("claude-4-opus", "Claude 4 Opus", category="chat", tier="premium"),
    Model("gpt-4-turbo", "GPT-4 Turbo", category="chat", tier="premium"),
    # --- Orchestration models ---
    Model(
        "claude-4-orchestrator",
        "Claude 4 Orchestrator",
        category="orchestration",
        tier="premium",
    ),
    Model(
        "meta-llama-orchestrator",
        "Meta Llama Orchestrator",
        category="orchestration",
        tier="standard",
    ),
    # --- Vision models ---
    Model("claude-4-vision", "Claude 4 Vision", category="vision", tier="premium"),
    Model("gpt-4-vision", "GPT-4 Vision", category="vision", tier="premium"),
)


def build_default_catalog(default_model_id: str = DEFAULT_MODEL) -> ModelCatalog:
    return ModelCatalog(DEFAULT_MODELS, default_model_id=default_model_id)
