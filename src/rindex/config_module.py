# config_module.py - Configuration settings for the rindex server

import argparse
import copy
import json
import logging
import os
from typing import Any, Dict, List, Optional

# Default configuration values
DEFAULT_CONFIG = {
    # Server settings
    'server': {
        'host': '127.0.0.1',
        'port': 3500,
        'log_level': 'INFO',
        'mcp_path': '/_mcp',
        'workers': None,  # None means one per CPU core
    },

    # Served directory
    'filesystem': {
        'root_path': '.',
        'confine_symlinks': False,
    },

    # Logging settings
    'logging': {
        'dir': None,  # No log file unless a directory is given
        'file': 'rindex.log',
        'backup_count': 7,
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    },
}

_TRUE_VALUES = ('true', 'yes', '1')


class Config:
    """
    Configuration manager for the rindex server.

    Values are layered: defaults, then a JSON file, then environment
    variables, then command line arguments.
    """

    def __init__(self, config_path: Optional[str] = None, argv: Optional[List[str]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to a configuration file
            argv: Command line arguments to apply last; None skips them
        """
        self.config_path = config_path
        self.config = copy.deepcopy(DEFAULT_CONFIG)

        # Load config from file if specified
        if config_path:
            self.load_from_file(config_path)

        # Override from environment variables
        self._override_from_env()

        # Override from command line arguments
        if argv is not None:
            self._override_from_args(argv)

    def load_from_file(self, config_path: str) -> None:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Raises:
            ValueError: If the file cannot be read or is not a JSON object
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Error loading configuration from {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ValueError(f"Configuration in {config_path} must be a JSON object")

        # Recursively update the default config with values from the file
        self._update_nested_dict(self.config, file_config)
        self.config_path = config_path

        logging.getLogger(__name__).info(f"Loaded configuration from {config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key.

        Args:
            key: Dot-separated path to the configuration value (e.g., 'server.port')
            default: Default value to return if the key is not found

        Returns:
            The configuration value or the default
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value by key.

        Args:
            key: Dot-separated path to the configuration value (e.g., 'server.port')
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        # Navigate to the nested dictionary
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def root_directory(self) -> str:
        """
        Get the served root directory as an absolute, resolved path.

        Raises:
            ValueError: If the configured root is not an existing directory
        """
        root = self.get('filesystem.root_path')
        if not root or not os.path.isdir(root):
            raise ValueError(f"Root directory does not exist: {root}")
        return os.path.realpath(root)

    def _update_nested_dict(self, d: Dict, u: Dict) -> Dict:
        """
        Recursively update a nested dictionary.

        Args:
            d: Dictionary to update
            u: Dictionary with updates

        Returns:
            Updated dictionary
        """
        for k, v in u.items():
            if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                d[k] = self._update_nested_dict(d[k], v)
            else:
                d[k] = v
        return d

    def _override_from_env(self) -> None:
        """Override configuration values from environment variables."""
        if 'RINDEX_DIRECTORY' in os.environ:
            self.set('filesystem.root_path', os.environ['RINDEX_DIRECTORY'])

        if 'RINDEX_CONFINE_SYMLINKS' in os.environ:
            self.set('filesystem.confine_symlinks', os.environ['RINDEX_CONFINE_SYMLINKS'].lower() in _TRUE_VALUES)

        if 'RINDEX_ADDRESS' in os.environ:
            self.set('server.host', os.environ['RINDEX_ADDRESS'])

        if 'RINDEX_PORT' in os.environ:
            try:
                self.set('server.port', int(os.environ['RINDEX_PORT']))
            except ValueError:
                pass

        if 'RINDEX_WORKERS' in os.environ:
            try:
                self.set('server.workers', int(os.environ['RINDEX_WORKERS']))
            except ValueError:
                pass

        if 'RINDEX_LOG_LEVEL' in os.environ:
            self.set('server.log_level', os.environ['RINDEX_LOG_LEVEL'])

        if os.environ.get('RINDEX_VERBOSE', '').lower() in _TRUE_VALUES:
            self.set('server.log_level', 'DEBUG')

        if 'RINDEX_LOG_DIR' in os.environ:
            self.set('logging.dir', os.environ['RINDEX_LOG_DIR'] or None)

    def _override_from_args(self, argv: List[str]) -> None:
        """Override configuration values from command line arguments."""
        args = build_arg_parser().parse_args(argv)

        # Load config from file if specified
        if args.config:
            self.load_from_file(args.config)
            # Environment still wins over the file
            self._override_from_env()

        if args.directory:
            self.set('filesystem.root_path', args.directory)

        if args.address:
            self.set('server.host', args.address)

        if args.port:
            self.set('server.port', args.port)

        if args.workers:
            self.set('server.workers', args.workers)

        if args.logdir:
            self.set('logging.dir', args.logdir)

        if args.log_level:
            self.set('server.log_level', args.log_level)

        if args.verbose:
            self.set('server.log_level', 'DEBUG')


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='rindex',
        description="Fast indexer compatible with nginx's autoindex module.",
    )

    parser.add_argument('-d', '--directory', help='base dir of the indexer')
    parser.add_argument('-a', '--address', help='ip address for listening')
    parser.add_argument('-p', '--port', type=int, help='port for listening')
    parser.add_argument('-f', '--logdir', help='directory of log files, empty for disable')
    parser.add_argument('-v', '--verbose', action='store_true', help='show debug logs')
    parser.add_argument('--log-level', help='Logging level')
    parser.add_argument('--workers', type=int, help='worker threads for scanning')
    parser.add_argument('--config', help='Path to configuration file')

    return parser


def load_config(argv: Optional[List[str]] = None) -> Config:
    """
    Build the configuration for a server run.

    Args:
        argv: Command line arguments (without the program name)

    Returns:
        Config instance
    """
    return Config(argv=argv if argv is not None else [])
