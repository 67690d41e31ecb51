import json
import os
import logging
from typing import Dict, Any, List, Optional

from app.core.config import settings

logger = logging.getLogger("app")

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "data",
    "business_config.json",
)

def get_config_path() -> str:
    return settings.BUSINESS_CONFIG_PATH or DEFAULT_CONFIG_PATH

def load_business_config() -> Dict[str, Any]:
    """
    Loads business configuration (opening hours, services) from JSON file.
    Raises FileNotFoundError if config is missing, ValueError if it is not valid JSON.
    """
    config_path = get_config_path()
    if not os.path.exists(config_path):
        logger.critical(f"❌ Business config '{config_path}' not found! The booking flow cannot start.")
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
            logger.debug(f"✅ Business config loaded for: {config.get('company_name', 'Unknown')}")
            return config
    except json.JSONDecodeError as e:
        logger.critical(f"❌ Failed to parse business config JSON: {e}")
        raise ValueError(f"Invalid JSON in config file: {e}")

def get_business_hours(config: Dict[str, Any], day_name: str) -> Optional[Dict[str, str]]:
    """
    Helper to get business hours for a specific day (monday, tuesday...).
    Returns: Dict {'start': 'HH:MM', 'end': 'HH:MM'} or None if closed.
    """
    hours = config.get("business_hours", {})
    return hours.get(day_name.lower())

def get_services(config: Dict[str, Any]) -> List[Dict[str, Any]]:
    return config.get("services", [])
