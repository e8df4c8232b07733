"""Configuration validation for the save archiver."""

from typing import Dict, Any


class ConfigValidator:
    """Validates save archiver configuration."""
    
    KNOWN_SECTIONS = ['save', 'monitoring', 'discovery', 'logging']
    LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    
    def validate(self, config: Dict[str, Any]) -> None:
        """Validate configuration data.
        
        Args:
            config: Configuration dictionary to validate.
            
        Raises:
            ValueError: If configuration is invalid.
        """
        self._validate_structure(config)
        
        if config.get('save'):
            self._validate_save_config(config['save'])
        if config.get('monitoring'):
            self._validate_monitoring_config(config['monitoring'])
        if config.get('discovery'):
            self._validate_discovery_config(config['discovery'])
        if config.get('logging'):
            self._validate_logging_config(config['logging'])
    
    def _validate_structure(self, config: Dict[str, Any]) -> None:
        """Validate basic configuration structure.
        
        Args:
            config: Configuration dictionary.
            
        Raises:
            ValueError: If unknown sections are present or a section is not a mapping.
        """
        unknown_sections = [section for section in config if section not in self.KNOWN_SECTIONS]
        if unknown_sections:
            raise ValueError(f"Unknown configuration sections: {unknown_sections}")
        
        for section in self.KNOWN_SECTIONS:
            value = config.get(section)
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"Configuration section '{section}' must be a dictionary")
    
    def _validate_save_config(self, save_config: Dict[str, Any]) -> None:
        """Validate live save naming.
        
        Raises:
            ValueError: If the base name or extension cannot form backup names.
        """
        if 'base_name' in save_config:
            base_name = save_config['base_name']
            if not isinstance(base_name, str) or not base_name:
                raise ValueError("Save base_name must be a non-empty string")
            if '-' in base_name:
                raise ValueError(f"Save base_name cannot contain '-': {base_name}")
            if '/' in base_name or '\\' in base_name:
                raise ValueError(f"Save base_name cannot contain path separators: {base_name}")
        
        if 'extension' in save_config:
            extension = save_config['extension']
            if not isinstance(extension, str) or not extension.startswith('.'):
                raise ValueError(f"Save extension must start with '.': {extension}")
    
    def _validate_monitoring_config(self, monitoring_config: Dict[str, Any]) -> None:
        """Validate monitoring configuration."""
        if 'poll_interval_seconds' in monitoring_config:
            interval = monitoring_config['poll_interval_seconds']
            try:
                if isinstance(interval, bool) or float(interval) <= 0:
                    raise ValueError()
            except (ValueError, TypeError):
                raise ValueError(f"Monitoring poll_interval_seconds must be a positive number: {interval}")
    
    def _validate_discovery_config(self, discovery_config: Dict[str, Any]) -> None:
        """Validate discovery configuration."""
        directories = discovery_config.get('save_directories')
        if directories is not None:
            if not isinstance(directories, list):
                raise ValueError("Discovery save_directories must be a list")
            for i, directory in enumerate(directories):
                if not isinstance(directory, str) or not directory:
                    raise ValueError(f"Discovery save directory {i} must be a non-empty string")
        
        app_id = discovery_config.get('app_id')
        if app_id is not None and not str(app_id).isdigit():
            raise ValueError(f"Discovery app_id must be numeric: {app_id}")
        
        steam_path = discovery_config.get('steam_path')
        if steam_path is not None and not isinstance(steam_path, str):
            raise ValueError("Discovery steam_path must be a string")
    
    def _validate_logging_config(self, logging_config: Dict[str, Any]) -> None:
        """Validate logging configuration."""
        level = logging_config.get('level')
        if level is not None and str(level).upper() not in self.LOG_LEVELS:
            raise ValueError(f"Invalid log level: {level}")
        
        for field in ('max_size_mb', 'backup_count'):
            if field in logging_config:
                value = logging_config[field]
                if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                    raise ValueError(f"Logging {field} must be a non-negative number: {value}")
