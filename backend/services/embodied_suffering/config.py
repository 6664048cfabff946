from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.datasets import normalize_path
from .models import Country, ImportSourceType


class EmbodiedSufferingSettings(BaseSettings):
    """Embodied suffering scoring configuration settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="EMBODIED_SUFFERING_"  # Environment variables prefixed with SERVICE_NAME_
    )

    # Service identity
    service_name: str = "embodied-suffering-service"
    version: str = "0.1.0"

    # Dataset library
    dataset_root: Optional[str] = None
    ituc_dataset_path: str = "EmbodiedSuffering/LabourExploitationRisk/2021ITUCGlobalRightsIndex"
    global_slavery_index_dataset_path: str = "EmbodiedSuffering/LabourExploitationRisk/2018GlobalSlaveryIndex"
    material_imports_prefix: str = "EmbodiedSuffering/Material Imports"

    # Import source defaults
    default_import_country: Country = Country.UNITED_STATES_OF_AMERICA
    default_import_source_type: ImportSourceType = ImportSourceType.BY_MASS

    # Scoring settings
    ratio_tolerance: float = 0.01  # ratios may deviate from 1.0 by 1% before a warning
    acceptable_slavery_threshold: float = 10.0  # victims per 1000 population

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

    @field_validator('ituc_dataset_path', 'global_slavery_index_dataset_path', 'material_imports_prefix')
    @classmethod
    def normalize_dataset_path(cls, v):
        return normalize_path(v)

    @field_validator('ratio_tolerance')
    @classmethod
    def validate_ratio_tolerance(cls, v):
        if v < 0 or v >= 1:
            raise ValueError("ratio_tolerance must be in [0, 1)")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level. Must be one of: {valid_levels}')
        return v.upper()


# Global settings instance
settings = EmbodiedSufferingSettings()
