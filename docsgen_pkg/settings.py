#!/usr/bin/env python3
"""
Settings loader for Docsgen.
Supports configuration from docsgen.yml, docsgen.yaml, or docsgen.json files,
with environment variables for the root document id and access token.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional


class DocsgenSettings:
    """Load and manage Docsgen configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'output': 'dist',
        'static': 'static',
        'templates': None,
        'root_doc_id': None,
        'access_token': None,
        'doc_hosts': ['docs.google.com'],
        'log_dir': 'logs',
        'site_title': None,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['docsgen.yml', 'docsgen.yaml', 'docsgen.json']

    # Environment variables and the settings they fill in
    ENVIRONMENT = {
        'ROOT_DOC_ID': 'root_doc_id',
        'GOOGLE_ACCESS_TOKEN': 'access_token',
    }

    def __init__(self, config_dir: str = None, environ: Dict[str, str] = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
            environ: Environment mapping. Defaults to os.environ.
        """
        self.config_dir = config_dir or os.getcwd()
        self.environ = os.environ if environ is None else environ
        self.settings = dict(self.DEFAULT_SETTINGS, doc_hosts=list(self.DEFAULT_SETTINGS['doc_hosts']))
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from the configuration file if it exists, then apply
        environment variables.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            try:
                loaded_settings = self._load_config_file(config_file)
                if loaded_settings:
                    self.settings.update(loaded_settings)
                    print(f"Loaded configuration from: {os.path.relpath(config_file)}")
            except (ValueError, OSError) as e:
                print(f"Warning: Failed to load config file {config_file}: {e}")

        for variable, key in self.ENVIRONMENT.items():
            value = self.environ.get(variable)
            if value:
                self.settings[key] = value

        self.settings['doc_hosts'] = self._split_hosts(self.settings.get('doc_hosts'))
        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Raises:
            ValueError: The file is not valid YAML/JSON or not a mapping.
            OSError: The file could not be read.
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        with open(config_path, 'r', encoding='utf-8') as f:
            try:
                if file_ext in ['.yml', '.yaml']:
                    loaded = yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    loaded = json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")

        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        return loaded

    @staticmethod
    def _split_hosts(value):
        if isinstance(value, str):
            return [host.strip() for host in value.split(',') if host.strip()]
        return list(value or [])

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        if file_format not in ('yml', 'yaml', 'json'):
            raise ValueError(f"Unsupported config file format: {file_format}")

        filename = f'docsgen.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        with open(config_path, 'w', encoding='utf-8') as f:
            if file_format in ['yml', 'yaml']:
                f.write("# Docsgen Configuration File\n\n")
                f.write("# Document to start the crawl from (or set ROOT_DOC_ID)\n")
                f.write("root_doc_id: your-root-document-id\n\n")
                f.write("# Build settings\n")
                f.write("output: dist\n")
                f.write("static: static\n")
                f.write("log_dir: logs\n\n")
                f.write("# Hosts whose document links are rewritten to site pages\n")
                f.write("doc_hosts:\n")
                f.write("  - docs.google.com\n\n")
                f.write("site_title: My Docs\n")
            else:
                sample = {k: v for k, v in self.DEFAULT_SETTINGS.items() if k != 'access_token'}
                sample['root_doc_id'] = 'your-root-document-id'
                json.dump(sample, f, indent=2)

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.
        """
        merged = self.settings.copy()

        for key, value in args_dict.items():
            if value is None:
                continue
            if key == 'doc_hosts':
                merged[key] = self._split_hosts(value)
            else:
                merged[key] = value

        return merged
