"""
Managers for reading settings from the process environment and .env files.
"""
import os
from typing import Dict, List, Optional

from dotenv import dotenv_values

from ..MODELS.settings import RuntimeSettings


class EnvironmentManager:
    """
    Manages the merging of environment variables from multiple sources.
    """
    def __init__(self, base_dir: str = "."):
        """
        Initializes the environment manager.

        :param base_dir: The base directory for resolving relative paths to .env files.
        """
        self.base_dir = base_dir

    def get_merged_environment(self, env_files: Optional[List[str]] = None) -> Dict[str, str]:
        """
        Merges variables from .env files with the current process environment.

        :param env_files: Paths to .env files; later files override earlier ones.
        :return: Merged variables. The process environment overrides file values.
        """
        merged_env: Dict[str, str] = {}

        for env_file in env_files or []:
            file_path = os.path.join(self.base_dir, env_file)
            if os.path.exists(file_path):
                values = dotenv_values(file_path)
                merged_env.update({k: v for k, v in values.items() if v is not None})

        merged_env.update(os.environ)
        return merged_env

    def load_settings(self, env_files: Optional[List[str]] = None) -> RuntimeSettings:
        """
        Loads runtime settings from the merged environment.
        """
        return RuntimeSettings.from_environment(self.get_merged_environment(env_files))
