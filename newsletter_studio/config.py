from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

# Streamlit is only needed for st.secrets. The core also runs from the command line without it.
try:
    import streamlit as st
except ImportError:
    st = None


class StreamlitSecretsSettingsSource(PydanticBaseSettingsSource):
    """
    Settings source that reads Streamlit's st.secrets.
    Nested secrets are flattened with an underscore and keys are uppercased to match env var conventions.
    """

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        # Values are resolved in bulk by __call__
        return None, field_name, False

    def _read_secrets(self) -> Dict[str, Any]:
        if st is None:
            return {}
        from streamlit.errors import StreamlitAPIException

        try:
            items = list(st.secrets.items())
        except (FileNotFoundError, StreamlitAPIException):
            # No secrets.toml outside of Streamlit Cloud or a local .streamlit folder
            return {}

        secrets_from_st: Dict[str, Any] = {}
        for k, v in items:
            if isinstance(v, dict) or hasattr(v, "items"):
                for sub_k, sub_v in v.items():
                    secrets_from_st[f"{k.upper()}_{sub_k.upper()}"] = sub_v
            else:
                secrets_from_st[k.upper()] = v
        return secrets_from_st

    def __call__(self) -> Dict[str, Any]:
        secrets_from_st = self._read_secrets()
        return {name: secrets_from_st[name] for name in self.settings_cls.model_fields if name in secrets_from_st}


class Settings(BaseSettings):
    """
    Application settings loaded from Streamlit secrets, environment variables or a .env file.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Streamlit secrets win over the environment, the environment wins over .env
        return (
            init_settings,
            StreamlitSecretsSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    # Gemini configuration
    GEMINI_API_KEY: Optional[str] = None
    TEXT_MODEL_NAME: str = "gemini-2.5-flash"
    IMAGE_MODEL_NAME: str = "imagen-4.0-generate-001"
    IMAGE_ASPECT_RATIO: str = "16:9"
    IMAGE_MIME_TYPE: str = "image/png"

    # News research window
    NEWS_RECENCY_HOURS: int = 48

    # Form defaults shown in the Streamlit app
    DEFAULT_TOPICS: str = "AI in healthcare,Renewable energy breakthroughs" # Comma-separated list
    DEFAULT_INDUSTRY: str = "Technology"
    DEFAULT_COMPANY_NAME: str = "Innovate Inc."
    DEFAULT_VISUAL_KEYWORDS: str = "abstract, futuristic, blue, network"
    DEFAULT_MIN_ARTICLES: int = 5
    DEFAULT_WORD_LENGTH: int = 100
    DEFAULT_TONE: str = "Professional"
    DEFAULT_NEWS_FORMAT: str = "paragraph"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True

    def get_default_topics_list(self) -> List[str]:
        return [topic.strip() for topic in self.DEFAULT_TOPICS.split(",") if topic.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Returns a cached instance of the Settings class.
    """
    return Settings()
