"""Load settings.yaml into typed dataclasses. Validates participant definitions at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

_REQUIRED_PARTICIPANT_FIELDS = ("id", "name", "role", "specialty", "persona", "expertise", "response_styles")


class ConfigError(ValueError):
    """Raised when settings.yaml is present but malformed."""


@dataclass
class ProviderConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: float
    base_url: str | None = None


@dataclass
class DefaultsConfig:
    provider: str
    timeout_sec: float = 30.0
    history_window: int = 6


@dataclass
class ParticipantConfig:
    id: str
    name: str
    role: str
    specialty: str
    avatar: str
    persona: str
    expertise: list[str]
    response_styles: list[str]
    fallbacks: list[str]
    follow_up_fallbacks: list[str]


@dataclass
class SelectionConfig:
    priority: list[str]
    min_confidence: float = 1.0
    word_bonus: float = 0.5
    keywords: dict[str, dict[str, float]] = field(default_factory=dict)
    topic_multipliers: dict[str, dict[str, float]] = field(default_factory=dict)


@dataclass
class TopicConfig:
    id: str
    description: str
    key_points: list[str] = field(default_factory=list)


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    providers: dict[str, ProviderConfig]
    participants: list[ParticipantConfig]
    selection: SelectionConfig
    topics: dict[str, TopicConfig] = field(default_factory=dict)
    available_providers: set[str] = field(default_factory=set)


def _string_list(raw: object, what: str) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(item, str) and item.strip() for item in raw):
        raise ConfigError(f"{what} must be a list of non-empty strings")
    return list(raw)


def _render_fallbacks(templates: list[str], raw: dict) -> list[str]:
    try:
        return [t.format(name=raw["name"], role=raw["role"], specialty=raw["specialty"]) for t in templates]
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigError(
            f"Participant '{raw['id']}' has a bad fallback template (use {{{{ and }}}} for literal braces): {exc!r}"
        ) from exc


def _load_participant(raw: object, primary: list[str], follow_up: list[str]) -> ParticipantConfig:
    """Validate one participant entry and render its fallback catalogs."""
    if not isinstance(raw, dict):
        raise ConfigError(f"Participant entry must be a mapping, got {type(raw).__name__}")

    missing = [key for key in _REQUIRED_PARTICIPANT_FIELDS if not raw.get(key)]
    if missing:
        label = raw.get("id", "<unnamed>")
        raise ConfigError(f"Participant '{label}' is missing required fields: {', '.join(missing)}")

    pid = str(raw["id"])
    fallbacks = _string_list(raw.get("fallbacks", primary), f"Participant '{pid}' fallbacks")
    follow_up_fallbacks = _string_list(
        raw.get("follow_up_fallbacks", follow_up), f"Participant '{pid}' follow_up_fallbacks"
    )
    if not fallbacks or not follow_up_fallbacks:
        raise ConfigError(f"Participant '{pid}' needs non-empty fallback catalogs")

    return ParticipantConfig(
        id=pid,
        name=str(raw["name"]),
        role=str(raw["role"]),
        specialty=str(raw["specialty"]),
        avatar=str(raw.get("avatar") or raw["name"][0]),
        persona=str(raw["persona"]),
        expertise=_string_list(raw["expertise"], f"Participant '{pid}' expertise"),
        response_styles=_string_list(raw["response_styles"], f"Participant '{pid}' response_styles"),
        fallbacks=_render_fallbacks(fallbacks, raw),
        follow_up_fallbacks=_render_fallbacks(follow_up_fallbacks, raw),
    )


def _load_selection(raw: dict) -> SelectionConfig:
    if "priority" not in raw:
        raise ConfigError("selection.priority is required")
    return SelectionConfig(
        priority=[str(p) for p in raw["priority"]],
        min_confidence=float(raw.get("min_confidence", 1.0)),
        word_bonus=float(raw.get("word_bonus", 0.5)),
        keywords={
            str(pid): {str(k).lower(): float(w) for k, w in (table or {}).items()}
            for pid, table in raw.get("keywords", {}).items()
        },
        topic_multipliers={
            str(topic): {str(pid): float(m) for pid, m in (table or {}).items()}
            for topic, table in raw.get("topic_multipliers", {}).items()
        },
    )


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing and ConfigError when a
    participant or selection entry is malformed. Logs which providers have an
    API key but does not raise for missing keys.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ConfigError(f"Settings file is empty or not a mapping: {settings_path}")

    defaults_raw = raw.get("defaults", {})
    defaults = DefaultsConfig(
        provider=str(defaults_raw.get("provider", "deepseek")),
        timeout_sec=float(defaults_raw.get("timeout_sec", 30)),
        history_window=int(defaults_raw.get("history_window", 6)),
    )

    fallbacks_raw = raw.get("fallbacks", {})
    primary = _string_list(fallbacks_raw.get("primary", []), "fallbacks.primary") if "primary" in fallbacks_raw else []
    follow_up = _string_list(fallbacks_raw.get("follow_up", []), "fallbacks.follow_up") if "follow_up" in fallbacks_raw else []

    participants = [_load_participant(p, primary, follow_up) for p in raw.get("participants") or []]
    if not participants:
        raise ConfigError("At least one participant must be configured")

    topics = {
        str(tid): TopicConfig(
            id=str(tid),
            description=str(t.get("description", "")),
            key_points=[str(k) for k in t.get("key_points", [])],
        )
        for tid, t in (raw.get("topics") or {}).items()
    }

    providers: dict[str, ProviderConfig] = {}
    available_providers: set[str] = set()

    for provider_name, provider_raw in (raw.get("providers") or {}).items():
        providers[provider_name] = ProviderConfig(
            name=provider_name,
            sdk=provider_raw["sdk"],
            model=provider_raw["model"],
            api_key_env=provider_raw["api_key_env"],
            timeout_sec=float(provider_raw.get("timeout_sec", defaults.timeout_sec)),
            base_url=provider_raw.get("base_url"),
        )

        api_key = os.environ.get(provider_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s, set %s in .env",
                provider_name,
                provider_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        providers=providers,
        participants=participants,
        selection=_load_selection(raw.get("selection") or {}),
        topics=topics,
        available_providers=available_providers,
    )
