from typing import Optional

from shared.logging_config import setup_logging
from .config import EmbodiedSufferingSettings, settings
from .reference import ReferenceContext


def create_context(config: Optional[EmbodiedSufferingSettings] = None) -> ReferenceContext:
    """Configure logging and build the reference context a host passes to the scorers"""
    config = config or settings
    logger = setup_logging(config.service_name, config.log_level, config.log_format)

    logger.info(f"Starting {config.service_name} v{config.version}...")
    try:
        context = ReferenceContext.from_settings(config)
    except Exception as e:
        logger.error(f"Failed to load reference datasets from {config.dataset_root}: {e}")
        raise

    logger.info(f"Reference datasets available at {config.dataset_root}")
    return context
