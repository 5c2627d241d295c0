"""Explicit configuration objects and their environment loaders."""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Mapping, Optional

from dotenv import load_dotenv

DEFAULT_EXTERNAL_SERVICES: FrozenSet[str] = frozenset(
    {
        "OpenAI", "Claude", "AWS", "Azure", "Google Cloud", "Firebase", "Supabase",
        "MongoDB", "PostgreSQL", "Redis", "Stripe", "PayPal", "SendGrid", "Twilio",
        "Auth0", "Clerk",
        "S3", "Lambda", "EC2", "DynamoDB", "RDS", "Firestore", "Cloud Functions",
        "Maps API", "Blob Storage", "Cognitive Services", "Braintree", "MySQL",
        "ChatGPT", "GPT-4", "Gemini", "OAuth", "JWT", "API", "SDK", "REST", "GraphQL",
        "Provider:", "Service Provider:", "Integration:",
    }
)


@dataclass(frozen=True)
class SemanticRules:
    min_content_length: int = 20
    min_external_service_content_length: int = 30
    known_external_service_names: FrozenSet[str] = field(
        default_factory=lambda: DEFAULT_EXTERNAL_SERVICES
    )


@dataclass(frozen=True)
class PipelineSettings:
    max_attempts: int = 3
    window_radius: int = 50

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.window_radius < 1:
            raise ValueError("window_radius must be at least 1")


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as error:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from error
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def _split_names(raw: str) -> Iterable[str]:
    return (name.strip() for name in raw.split(",") if name.strip())


def load_rules_from_env(env: Optional[Mapping[str, str]] = None) -> SemanticRules:
    if env is None:
        load_dotenv()
        env = os.environ
    defaults = SemanticRules()
    services_raw = env.get("FLOW_GRAPH_EXTERNAL_SERVICES")
    services = (
        frozenset(_split_names(services_raw))
        if services_raw and services_raw.strip()
        else defaults.known_external_service_names
    )
    return SemanticRules(
        min_content_length=_read_int(
            env, "FLOW_GRAPH_MIN_CONTENT_LENGTH", defaults.min_content_length
        ),
        min_external_service_content_length=_read_int(
            env,
            "FLOW_GRAPH_MIN_EXTERNAL_CONTENT_LENGTH",
            defaults.min_external_service_content_length,
        ),
        known_external_service_names=services,
    )


def load_settings_from_env(env: Optional[Mapping[str, str]] = None) -> PipelineSettings:
    if env is None:
        load_dotenv()
        env = os.environ
    defaults = PipelineSettings()
    return PipelineSettings(
        max_attempts=_read_int(env, "FLOW_GRAPH_MAX_REPAIR_ATTEMPTS", defaults.max_attempts),
        window_radius=_read_int(env, "FLOW_GRAPH_REPAIR_WINDOW", defaults.window_radius),
    )
