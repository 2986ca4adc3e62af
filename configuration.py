from dataclasses import dataclass
from typing import TypedDict
import json

from errors import ConfigUnreadable
from logging_config import get_logger
from suites import Suite, SuiteRegistry, registry as default_registry

CONFIGURATION_FILE = "config.json"

logger = get_logger(__name__)


class TrustConfiguration(TypedDict):
    suite: str
    aggregate_public_key: str


def load_json_configuration(path, configuration_type):
    try:
        with open(path, 'r') as file:
            data = json.load(file)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigUnreadable(f"Couldn't load config-file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigUnreadable(f"Config-file {path} must hold a JSON object")
    must_have_items = list(configuration_type.__annotations__.keys())
    missing = [c for c in must_have_items if c not in data]
    if missing:
        raise ConfigUnreadable(f"Config-file {path} is missing {', '.join(missing)}")
    logger.debug("configuration loaded", path=str(path), keys=sorted(data))
    return data


@dataclass(frozen=True)
class TrustConfig:
    """
    The trust anchor of an audit: the suite and the aggregate public key
    of the witness group. Built once and shared read-only afterwards.
    """
    suite_name: str
    aggregate_public_key_encoded: str
    suite: Suite
    aggregate_public_key: int

    @classmethod
    def from_mapping(cls, data: TrustConfiguration, registry: SuiteRegistry = None, source="<mapping>") -> "TrustConfig":
        if registry is None:
            registry = default_registry
        missing = [c for c in TrustConfiguration.__annotations__ if c not in data]
        if missing:
            raise ConfigUnreadable(f"Configuration {source} is missing {', '.join(missing)}")
        encoded = data["aggregate_public_key"]
        if not isinstance(encoded, str):
            raise ConfigUnreadable(f"aggregate_public_key in {source} must be a string")
        suite = registry.resolve(data["suite"])
        public = suite.decode_point_base64(encoded.strip())
        logger.info("trust anchor loaded", source=str(source), suite=suite.name)
        return cls(suite_name=suite.name,
                   aggregate_public_key_encoded=encoded.strip(),
                   suite=suite,
                   aggregate_public_key=public)

    @classmethod
    def load(cls, path=CONFIGURATION_FILE, registry: SuiteRegistry = None) -> "TrustConfig":
        data: TrustConfiguration = load_json_configuration(path, TrustConfiguration)
        return cls.from_mapping(data, registry=registry, source=path)

    def to_dict(self) -> TrustConfiguration:
        return {"suite": self.suite_name, "aggregate_public_key": self.aggregate_public_key_encoded}
