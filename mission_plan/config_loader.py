"""Configuration management for mission plan ingestion"""
import yaml
import os
import logging
from typing import Dict, Any, List
from .dialects.exceptions import ConfigError
from .dialects.tree import as_list

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MISSION_PLAN_CONFIG"
DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config", "mission_plan.yaml"
)

class ConfigLoader:
    """Load and validate configuration from YAML files"""
    
    def __init__(self, config_path: str = None):
        self.config_path = config_path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
        self._config = None
        self.load_config()
    
    def load_config(self) -> None:
        """Load configuration from YAML file"""
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Config file not found: {self.config_path}")
            
        try:
            with open(self.config_path, 'r') as file:
                self._config = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

        self.validate_config()
        logger.debug(f"Loaded mission plan config from {self.config_path}")
    
    def validate_config(self) -> None:
        """Validate required configuration sections"""
        if not isinstance(self._config, dict):
            raise ConfigError("Configuration must be a mapping")

        required_sections = ['projection', 'dialects']
        
        for section in required_sections:
            if section not in self._config:
                raise ConfigError(f"Missing required config section: {section}")

        projection = self._config['projection'] or {}
        for key in ('earth_radius_m', 'coordinate_tolerance', 'min_cos_latitude'):
            value = projection.get(key)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"projection.{key} must be a positive number")
    
    def get_projection_params(self) -> Dict[str, float]:
        """Get dead-reckoning parameters as projector keyword arguments"""
        projection = self._config['projection']
        return {
            'earth_radius_m': float(projection['earth_radius_m']),
            'coordinate_tolerance': float(projection['coordinate_tolerance']),
            'min_cos_latitude': float(projection['min_cos_latitude']),
            'initial_heading_deg': float(projection.get('initial_heading_deg', 0.0)),
        }
    
    def get_action_tags(self) -> List[str]:
        """Get the behavior-tree action whitelist"""
        return [str(tag) for tag in as_list((self._config['dialects'] or {}).get('action_tags'))]

# Global config instance
_config_instance = None

def get_config() -> ConfigLoader:
    """Get global config instance"""
    global _config_instance
    if _config_instance is None:
        _config_instance = ConfigLoader()
    return _config_instance
