"""Filter engine settings and configuration."""

from dataclasses import dataclass, field
from typing import Tuple
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _split_fields(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass
class NullOptionConfig:
    """Defaults for the "unset/none" pseudo-value."""

    id: str = field(default_factory=lambda: os.getenv("FILTER_ENGINE_NULL_OPTION_ID", "none"))
    label: str = field(
        default_factory=lambda: os.getenv("FILTER_ENGINE_NULL_OPTION_LABEL", "None")
    )


@dataclass
class SearchConfig:
    """Free-text search settings."""

    fields: Tuple[str, ...] = field(
        default_factory=lambda: _split_fields(
            os.getenv("FILTER_ENGINE_SEARCH_FIELDS", "label,value,category")
        )
    )


@dataclass
class DisplayConfig:
    """Pill label settings."""

    label_max_length: int = field(
        default_factory=lambda: int(os.getenv("FILTER_ENGINE_LABEL_MAX_LENGTH", "15"))
    )
    mobile_label_max_length: int = field(
        default_factory=lambda: int(os.getenv("FILTER_ENGINE_MOBILE_LABEL_MAX_LENGTH", "10"))
    )
    # Above this many selected values a multi-select pill shows a count
    max_selected_labels: int = field(
        default_factory=lambda: int(os.getenv("FILTER_ENGINE_MAX_SELECTED_LABELS", "2"))
    )


@dataclass
class AppConfig:
    """Application-level settings."""

    log_level: str = field(default_factory=lambda: os.getenv("FILTER_ENGINE_LOG_LEVEL", "INFO"))


@dataclass
class Config:
    """Main configuration container."""

    null_option: NullOptionConfig = field(default_factory=NullOptionConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    app: AppConfig = field(default_factory=AppConfig)


# Global config instance
config = Config()
