"""Configuration management for switchbar."""

from pathlib import Path
from typing import Dict, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError


class BoostConfig(BaseModel):
    title: float = 4.0
    url_base: float = 3.0
    url_query: float = 2.0
    url_hash: float = 1.0

    def as_dict(self) -> Dict[str, float]:
        return self.model_dump()


class SearchConfig(BaseModel):
    boosts: BoostConfig = Field(default_factory=BoostConfig)
    fuzzy: float = 0.1
    fuzzy_prefix_length: int = 1
    ngram_min: int = 3
    ngram_max: int = 10

    @field_validator('fuzzy')
    @classmethod
    def validate_fuzzy(cls, v: float) -> float:
        if not 0 <= v < 1:
            raise ValueError("fuzzy must be a fraction between 0 and 1")
        return v

    @model_validator(mode='after')
    def validate_ngrams(self) -> "SearchConfig":
        if self.ngram_min < 1 or self.ngram_max < self.ngram_min:
            raise ValueError("ngram sizes must satisfy 1 <= ngram_min <= ngram_max")
        return self


class PipelineConfig(BaseModel):
    intermediate_cap: int = 100
    display_cap: int = 5

    @field_validator('intermediate_cap', 'display_cap')
    @classmethod
    def validate_cap(cls, v: int) -> int:
        if v < 0:
            raise ValueError("result caps cannot be negative")
        return v


class HistoryConfig(BaseModel):
    lookback_days: int = 28
    max_results_per_token: int = 100


class FaviconConfig(BaseModel):
    enabled: bool = True
    service_url: str = "https://www.google.com/s2/favicons?domain={host}&sz=32"
    ttl_days: float = 365
    timeout_seconds: float = 3.0
    max_retries: int = 1
    cache_path: Optional[Path] = None


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[Path] = None

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return v


class SwitchbarConfig(BaseModel):
    """Main configuration for the command bar search core."""

    search: SearchConfig = Field(default_factory=SearchConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    favicons: FaviconConfig = Field(default_factory=FaviconConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "SwitchbarConfig":
        """
        Load configuration from a YAML file.

        Without an explicit path the default locations are tried in order;
        if none exists the built-in defaults are returned.

        Raises:
            ConfigError: If the file cannot be read or fails validation
        """
        if config_path is None:
            candidates = [
                Path("switchbar.yaml"),
                Path.home() / ".config" / "switchbar" / "config.yaml",
            ]
            for candidate in candidates:
                if candidate.exists():
                    config_path = candidate
                    break
            else:
                logger.debug("No config file found, using defaults")
                return cls()

        config_path = Path(config_path)
        logger.info(f"Loading config from: {config_path}")
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read {config_path}: {e}") from e
        except (ValidationError, TypeError) as e:
            raise ConfigError(f"Invalid config in {config_path}: {e}") from e

    def save(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.model_dump(mode='json'), f, default_flow_style=False)
