"""Configuration management for the save archiver."""

import copy
import os
import yaml
from typing import Dict, List, Any, Optional
from .config_validator import ConfigValidator


DEFAULT_CONFIG = {
    'save': {
        'base_name': 'DDDA',
        'extension': '.sav',
    },
    'monitoring': {
        'poll_interval_seconds': 5,
    },
    'discovery': {
        'steam_path': None,
        'app_id': '367500',
        'save_directories': [],
    },
    'logging': {
        'level': 'INFO',
        'file': None,
        'max_size_mb': 10,
        'backup_count': 5,
    },
}


class ConfigManager:
    """Manages configuration loading and validation for the save archiver."""
    
    DEFAULT_CONFIG_LOCATIONS = [
        "config.yaml",
        "config.yml",
        os.path.expanduser("~/.save-archiver/config.yaml"),
        os.path.expanduser("~/.save-archiver/config.yml"),
    ]
    
    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.
        
        Args:
            config_path: Optional path to config file. If not provided,
                        will search in default locations and fall back to
                        built-in defaults.
        """
        self.config_path = config_path
        self.config_file: Optional[str] = None
        self.config_data: Dict[str, Any] = {}
        self.validator = ConfigValidator()
        
    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file.
        
        Returns:
            Dictionary containing configuration data.
            
        Raises:
            FileNotFoundError: If an explicit config file does not exist.
            ValueError: If config file is invalid.
        """
        self.config_file = self._find_config_file()
        self.config_data = {}
        
        if self.config_file:
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    self.config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in config file {self.config_file}: {e}")
            except OSError as e:
                raise ValueError(f"Error reading config file {self.config_file}: {e}")
        
        if not isinstance(self.config_data, dict):
            raise ValueError(f"Config file {self.config_file} must contain a mapping")
        
        # Validate configuration
        self.validator.validate(self.config_data)
        
        # Set defaults
        self._set_defaults()
        
        return self.config_data
    
    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in default locations.
        
        Returns:
            Path to configuration file, or None to use defaults only.
            
        Raises:
            FileNotFoundError: If an explicit config file is not found.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            else:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")
        
        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location
        
        return None
    
    def _set_defaults(self):
        """Set default values for optional configuration parameters."""
        defaults = copy.deepcopy(DEFAULT_CONFIG)
        
        # Merge defaults with existing config
        for section, section_defaults in defaults.items():
            if not self.config_data.get(section):
                self.config_data[section] = {}
            for key, value in section_defaults.items():
                if key not in self.config_data[section]:
                    self.config_data[section][key] = value
    
    def get_save_config(self) -> Dict[str, Any]:
        """Get live save naming configuration.
        
        Returns:
            Save configuration dictionary.
        """
        return self.config_data.get('save', {})
    
    def get_monitoring_config(self) -> Dict[str, Any]:
        """Get monitoring configuration.
        
        Returns:
            Monitoring configuration dictionary.
        """
        return self.config_data.get('monitoring', {})
    
    def get_discovery_config(self) -> Dict[str, Any]:
        """Get save directory discovery configuration.
        
        Returns:
            Discovery configuration dictionary.
        """
        return self.config_data.get('discovery', {})
    
    def get_save_directories(self) -> List[str]:
        """Get explicitly configured save directories."""
        return self.get_discovery_config().get('save_directories') or []
    
    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.
        
        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', {})
