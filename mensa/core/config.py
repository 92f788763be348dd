import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from dotenv import load_dotenv

from mensa.core.logging_config import get_logger
from mensa.models import RuleOverrides
from mensa.services.filter_service import RuleSet

logger = get_logger(__name__)


@dataclass(frozen=True)
class RuleConfig:
    """Raw allow/deny lists for one concern (filter or favorites)."""

    allow_tags: Tuple[str, ...] = ()
    deny_tags: Tuple[str, ...] = ()
    allow_categories: Tuple[str, ...] = ()
    deny_categories: Tuple[str, ...] = ()
    allow_names: Tuple[str, ...] = ()
    deny_names: Tuple[str, ...] = ()

    @classmethod
    def from_overrides(cls, overrides: RuleOverrides) -> "RuleConfig":
        return cls(
            allow_tags=tuple(overrides.allow_tags),
            deny_tags=tuple(overrides.deny_tags),
            allow_categories=tuple(overrides.allow_categories),
            deny_categories=tuple(overrides.deny_categories),
            allow_names=tuple(overrides.allow_names),
            deny_names=tuple(overrides.deny_names)
        )

    def joined(self, other: "RuleConfig") -> "RuleConfig":
        return RuleConfig(
            allow_tags=self.allow_tags + other.allow_tags,
            deny_tags=self.deny_tags + other.deny_tags,
            allow_categories=self.allow_categories + other.allow_categories,
            deny_categories=self.deny_categories + other.deny_categories,
            allow_names=self.allow_names + other.allow_names,
            deny_names=self.deny_names + other.deny_names
        )

    def with_overrides(self, overrides: Optional[RuleOverrides]) -> "RuleConfig":
        """Extend with request overrides, or replace entirely when they ask to overwrite."""
        if overrides is None:
            return self
        extra = RuleConfig.from_overrides(overrides)
        return extra if overrides.overwrite else self.joined(extra)

    def to_rule_set(self) -> RuleSet:
        return RuleSet.from_parts(
            allow_tags=self.allow_tags,
            deny_tags=self.deny_tags,
            allow_categories=self.allow_categories,
            deny_categories=self.deny_categories,
            allow_names=self.allow_names,
            deny_names=self.deny_names
        )


@dataclass(frozen=True)
class MensaConfig:
    default_canteen_id: Optional[Union[int, str]] = None
    filter: RuleConfig = field(default_factory=RuleConfig)
    favorites: RuleConfig = field(default_factory=RuleConfig)
    request_timeout_seconds: int = 10
    cache_ttl_seconds: int = 3600
    # Canteen id -> OpenMensa id, on top of rules.OPENMENSA_IDS
    openmensa_ids: Dict[int, int] = field(default_factory=dict)


ENV_RULE_LISTS = {
    ("filter", "allow_tags"): "MENSA_FILTER_TAG_ALLOW",
    ("filter", "deny_tags"): "MENSA_FILTER_TAG_DENY",
    ("filter", "allow_categories"): "MENSA_FILTER_CATEGORY_ALLOW",
    ("filter", "deny_categories"): "MENSA_FILTER_CATEGORY_DENY",
    ("filter", "allow_names"): "MENSA_FILTER_NAME_ALLOW",
    ("filter", "deny_names"): "MENSA_FILTER_NAME_DENY",
    ("favorites", "allow_tags"): "MENSA_FAVS_TAG_ALLOW",
    ("favorites", "deny_tags"): "MENSA_FAVS_TAG_DENY",
    ("favorites", "allow_categories"): "MENSA_FAVS_CATEGORY_ALLOW",
    ("favorites", "deny_categories"): "MENSA_FAVS_CATEGORY_DENY",
    ("favorites", "allow_names"): "MENSA_FAVS_NAME_ALLOW",
    ("favorites", "deny_names"): "MENSA_FAVS_NAME_DENY",
}


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_canteen_id(value: Any) -> Optional[Union[int, str]]:
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() == "all":
        return "all"
    canteen_id = _as_int(value, -1)
    if canteen_id < 0:
        logger.warning(f"Ignoring invalid default canteen id: {value!r}")
        return None
    return canteen_id


def _as_list(value: Any, separator: str = ",") -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(separator) if part.strip())
    return tuple(str(item) for item in value)


def _env_list(attribute: str, raw: str) -> Tuple[str, ...]:
    """Tag lists are comma separated. Regex lists take one pattern per line,
    since a regex may itself contain commas (`a{1,2}`)."""
    if attribute.endswith("_tags"):
        return _as_list(raw)
    return _as_list(raw, separator="\n")


def _openmensa_ids(value: Any) -> Dict[int, int]:
    ids = {}
    for canteen_id, openmensa_id in (value or {}).items():
        key, target = _as_int(canteen_id, -1), _as_int(openmensa_id, -1)
        if key < 0 or target < 0:
            logger.warning(f"Ignoring invalid OpenMensa id mapping: {canteen_id!r} -> {openmensa_id!r}")
            continue
        ids[key] = target
    return ids


def _rule_config(data: Dict[str, Any]) -> RuleConfig:
    """Read a section with `tag`, `category` and `name` parts, each `{"allow": [...], "deny": [...]}`."""
    tag = data.get("tag") or {}
    category = data.get("category") or {}
    name = data.get("name") or {}
    return RuleConfig(
        allow_tags=_as_list(tag.get("allow")),
        deny_tags=_as_list(tag.get("deny")),
        allow_categories=_as_list(category.get("allow")),
        deny_categories=_as_list(category.get("deny")),
        allow_names=_as_list(name.get("allow")),
        deny_names=_as_list(name.get("deny"))
    )


def _config_path() -> Path:
    env_path = os.getenv("MENSA_CONFIG")
    if env_path:
        return Path(env_path)
    return Path(__file__).resolve().parents[2] / "config" / "mensa_config.json"


def _read_file(config_path: Path) -> Dict[str, Any]:
    try:
        return json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.info(f"No configuration file at {config_path}, using defaults")
        return {}
    except json.JSONDecodeError as exc:
        logger.warning(f"Invalid config JSON at {config_path}: {exc}")
        return {}


def _apply_env(config: MensaConfig) -> MensaConfig:
    """Environment variables take precedence over the configuration file."""
    default_canteen_id = config.default_canteen_id
    if os.getenv("MENSA_ID"):
        default_canteen_id = _as_canteen_id(os.getenv("MENSA_ID"))

    sections = {"filter": config.filter, "favorites": config.favorites}
    for (section, attribute), variable in ENV_RULE_LISTS.items():
        raw = os.getenv(variable)
        if raw is None:
            continue
        current = sections[section]
        sections[section] = replace(current, **{attribute: _env_list(attribute, raw)})

    return replace(
        config,
        default_canteen_id=default_canteen_id,
        filter=sections["filter"],
        favorites=sections["favorites"],
        request_timeout_seconds=_as_int(os.getenv("MENSA_REQUEST_TIMEOUT"), config.request_timeout_seconds),
        cache_ttl_seconds=_as_int(os.getenv("MENSA_CACHE_TTL"), config.cache_ttl_seconds)
    )


def load_config(path: Optional[Path] = None) -> MensaConfig:
    load_dotenv()
    config_path = path or _config_path()
    data = _read_file(config_path)

    config = MensaConfig(
        default_canteen_id=_as_canteen_id(data.get("default_canteen_id")),
        filter=_rule_config(data.get("filter") or {}),
        favorites=_rule_config(data.get("favs") or {}),
        request_timeout_seconds=_as_int(data.get("request_timeout_seconds"), 10),
        cache_ttl_seconds=_as_int(data.get("cache_ttl_seconds"), 3600),
        openmensa_ids=_openmensa_ids(data.get("openmensa_ids"))
    )
    return _apply_env(config)
