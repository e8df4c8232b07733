"""Locating save directories that hold a live save."""

import logging
import os
import platform
from pathlib import Path
from typing import List, Optional

from .errors import DiscoveryError

STEAM_REGISTRY_KEY = r"Software\Valve\Steam"
STEAM_REGISTRY_VALUE = "SteamPath"

DEFAULT_STEAM_LOCATIONS = [
    os.path.expanduser("~/.steam/steam"),
    os.path.expanduser("~/.local/share/Steam"),
]


def _read_steam_registry_path() -> Optional[str]:
    """Return the Steam install path recorded in the Windows registry."""
    import winreg
    
    try:
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, STEAM_REGISTRY_KEY) as key:
            value, _ = winreg.QueryValueEx(key, STEAM_REGISTRY_VALUE)
    except OSError as e:
        raise DiscoveryError(f"Could not read Steam path from registry: {e}") from e
    return value or None


class SaveDirectoryLocator:
    """Finds candidate save directories in configured paths and Steam userdata."""
    
    def __init__(self, primary_name: str, app_id: str, steam_path: Optional[str] = None,
                 save_directories: Optional[List[str]] = None):
        """Initialize save directory locator.
        
        Args:
            primary_name: Filename of the live save, e.g. ``DDDA.sav``.
            app_id: Steam application id whose remote directory holds saves.
            steam_path: Steam install to use instead of looking one up.
            save_directories: Directories to try before Steam.
        """
        self.primary_name = primary_name
        self.app_id = str(app_id)
        self.steam_path = steam_path
        self.save_directories = save_directories or []
        self.logger = logging.getLogger(__name__)
    
    def discover(self) -> List[str]:
        """Return candidate directories that contain the live save.
        
        Returns:
            Directories in probe order, without duplicates.
            
        Raises:
            DiscoveryError: If Steam cannot be enumerated when it is needed,
                or if no directory holds the live save.
        """
        found: List[str] = []
        
        for directory in self.save_directories:
            self._add_candidate(found, os.path.expanduser(directory))
        
        try:
            steam_root = self._find_steam_root()
            steam_dirs = self._steam_candidates(steam_root) if steam_root is not None else []
        except DiscoveryError as e:
            if found:
                self.logger.debug(f"Using configured directories only: {e}")
                return found
            raise

        for directory in steam_dirs:
            self._add_candidate(found, directory)
        
        if not found:
            raise DiscoveryError(f"No save directory containing {self.primary_name} was found")
        
        self.logger.info(f"Discovered {len(found)} save directories")
        return found
    
    def _add_candidate(self, found: List[str], directory: str) -> None:
        directory = os.path.abspath(directory)
        if directory in found:
            return
        if os.path.isfile(os.path.join(directory, self.primary_name)):
            self.logger.debug(f"Save directory found: {directory}")
            found.append(directory)
        else:
            self.logger.debug(f"No {self.primary_name} in {directory}")
    
    def _find_steam_root(self) -> Optional[str]:
        """Return the Steam install directory, or None if there is none."""
        if self.steam_path:
            return os.path.expanduser(self.steam_path)
        
        if platform.system() == "Windows":
            return _read_steam_registry_path()
        
        for location in DEFAULT_STEAM_LOCATIONS:
            if os.path.isdir(location):
                return location
        return None
    
    def _steam_candidates(self, steam_root: str) -> List[str]:
        """List ``userdata/<user>/<app_id>/remote`` for every Steam user."""
        userdata = Path(steam_root) / "userdata"
        try:
            users = sorted(entry.name for entry in os.scandir(userdata) if entry.is_dir())
        except OSError as e:
            raise DiscoveryError(f"Could not list Steam users in {userdata}: {e}") from e
        
        return [str(userdata / user / self.app_id / "remote") for user in users]
