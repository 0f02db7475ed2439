# Tool provider configuration
"""
Tool provider configuration.

Providers are declared under the ``mcpServers`` key of a ``.chara.json``
file. Each entry is either a command config (``command``/``args``/``env``)
spawned as a subprocess, or a network config (``url``/``headers``). The
shape is resolved once here into a tagged model; nothing downstream
inspects raw dicts again.
"""
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Tuple, Union
from pathlib import Path
import json
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from capabilities.models import TransportKind

logger = logging.getLogger(__name__)


class CommandProviderConfig(BaseModel):
    """Provider reached by spawning a local process"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["command"] = "command"
    command: str
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    enabled: bool = True

    @property
    def transport(self) -> TransportKind:
        return TransportKind.SUBPROCESS


class NetworkProviderConfig(BaseModel):
    """Provider reached over HTTP (server-sent events)"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["network"] = "network"
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    enabled: bool = True

    @property
    def transport(self) -> TransportKind:
        return TransportKind.NETWORK


ToolProviderConfig = Union[CommandProviderConfig, NetworkProviderConfig]


def parse_provider_config(name: str, raw: Mapping[str, Any]) -> Optional[ToolProviderConfig]:
    """
    Resolve one raw provider entry into a typed config

    Args:
        name: Provider name (used for log messages)
        raw: Raw mapping from the config file

    Returns:
        CommandProviderConfig, NetworkProviderConfig, or None when the
        entry matches neither shape or fails validation
    """
    if not isinstance(raw, Mapping):
        logger.warning(f"Invalid configuration for provider '{name}', skipping")
        return None

    try:
        if "command" in raw:
            return CommandProviderConfig(**{k: v for k, v in raw.items() if k != "kind"})
        if "url" in raw:
            return NetworkProviderConfig(**{k: v for k, v in raw.items() if k != "kind"})
    except PydanticValidationError as e:
        logger.warning(f"Invalid configuration for provider '{name}', skipping: {e}")
        return None

    logger.warning(
        f"Provider '{name}' has neither 'command' nor 'url', skipping"
    )
    return None


def coerce_provider_config(name: str, value: Any) -> Optional[ToolProviderConfig]:
    """Accept an already typed config or a raw mapping"""
    if isinstance(value, (CommandProviderConfig, NetworkProviderConfig)):
        return value
    return parse_provider_config(name, value)


def parse_provider_configs(
    entries: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]],
) -> Dict[str, ToolProviderConfig]:
    """
    Resolve a set of provider entries

    Duplicate names keep the last entry and log a warning. Entries that
    match no transport shape are dropped.

    Args:
        entries: Mapping of name -> raw config, or (name, raw) pairs in
            file order

    Returns:
        Dict of provider name -> typed config
    """
    pairs = entries.items() if isinstance(entries, Mapping) else entries

    configs: Dict[str, ToolProviderConfig] = {}
    seen = set()
    for name, raw in pairs:
        if name in seen:
            logger.warning(f"Provider '{name}' is configured more than once, last one wins")
            configs.pop(name, None)
        seen.add(name)

        config = coerce_provider_config(name, raw)
        if config is not None:
            configs[name] = config

    return configs


class _PairsDict(dict):
    """dict that also remembers its key/value pairs in file order, repeats included"""

    def __init__(self, pairs: List[Tuple[str, Any]]):
        super().__init__(pairs)
        self.pairs = pairs


def load_provider_configs(path: Union[str, Path]) -> Dict[str, ToolProviderConfig]:
    """
    Load providers from the ``mcpServers`` section of a JSON config file

    Args:
        path: Path to the config file

    Returns:
        Dict of provider name -> typed config (empty when the file or
        section is missing)
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No provider config at {path}, starting without tool providers")
        return {}

    document = json.loads(path.read_text(encoding="utf-8"), object_pairs_hook=_PairsDict)

    servers = document.get("mcpServers") if isinstance(document, dict) else None
    if not servers:
        return {}

    if not isinstance(servers, dict):
        logger.warning(f"'mcpServers' in {path} is not an object, ignoring")
        return {}

    configs = parse_provider_configs(getattr(servers, "pairs", list(servers.items())))
    logger.info(f"Loaded {len(configs)} provider config(s) from {path}")
    return configs
