#!/usr/bin/env python3
"""
Settings loader for Pagewright.
Supports configuration from pagewright.yml, pagewright.yaml, or pagewright.json files.

A configuration holds either one task (top-level ``src``, ``dest``, ``url``,
``layout`` and ``options``) or several named ``targets``. Target options are
merged over the top-level ``options``.
"""

import copy
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError

TASK_KEYS = ['src', 'dest', 'url', 'layout']
OPTION_ARGS = ['data', 'page_src', 'template_engine']
PAGINATION_ARGS = ['posts_per_page', 'list_page']

# camelCase spellings accepted alongside snake_case
OPTION_ALIASES = {
    'pageSrc': 'page_src',
    'templateEngine': 'template_engine',
}
PAGINATION_ALIASES = {
    'postsPerPage': 'posts_per_page',
    'listPage': 'list_page',
}

logger = logging.getLogger('Pagewright')


@dataclass
class PaginationConfig:
    posts_per_page: int
    list_page: str


@dataclass
class TaskConfig:
    """One fully resolved build task."""

    src: str
    dest: str
    url: str
    layout: str
    name: Optional[str] = None
    data: Optional[str] = None
    page_src: Optional[str] = None
    template_engine: Optional[str] = None
    pagination: Optional[PaginationConfig] = None


def _rename_keys(mapping: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    return {aliases.get(key, key): value for key, value in mapping.items()}


def normalize_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a copy of ``options`` with snake_case keys throughout."""
    normalized = _rename_keys(dict(options or {}), OPTION_ALIASES)
    pagination = normalized.get('pagination')
    if isinstance(pagination, dict):
        normalized['pagination'] = _rename_keys(pagination, PAGINATION_ALIASES)
    return normalized


def merge_options(base: Optional[Dict[str, Any]], override: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge target options over task-wide options; ``pagination`` merges key by key."""
    merged = normalize_options(base)
    override = normalize_options(override)
    base_pagination = merged.get('pagination')
    for key, value in override.items():
        if key == 'pagination' and isinstance(value, dict) and isinstance(base_pagination, dict):
            combined = dict(base_pagination)
            combined.update(value)
            merged[key] = combined
        else:
            merged[key] = value
    return merged


def _posts_per_page(value: Any, name: Optional[str]) -> int:
    try:
        posts_per_page = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"posts_per_page for task {name or 'default'} must be an integer, got {value!r}"
        ) from None
    if posts_per_page < 1:
        logger.warning(f"posts_per_page of {posts_per_page} corrected to 1")
        posts_per_page = 1
    return posts_per_page


def build_task_config(settings: Dict[str, Any], name: Optional[str] = None) -> TaskConfig:
    """
    Validate raw task settings and build a TaskConfig.

    Args:
        settings: Mapping with ``src``, ``dest``, ``url``, ``layout`` and optional ``options``
        name: Target name, used in error messages

    Returns:
        TaskConfig ready for a build

    Raises:
        ConfigurationError: A required setting is missing or invalid
    """
    missing = [key for key in TASK_KEYS if not settings.get(key)]
    if missing:
        raise ConfigurationError(
            f"Task {name or 'default'} is missing required setting(s): {', '.join(missing)}"
        )

    options = normalize_options(settings.get('options'))

    pagination = None
    pagination_raw = options.get('pagination')
    if pagination_raw:
        if not isinstance(pagination_raw, dict):
            raise ConfigurationError(f"pagination for task {name or 'default'} must be a mapping")
        if not pagination_raw.get('list_page'):
            raise ConfigurationError(f"pagination for task {name or 'default'} needs a list_page")
        pagination = PaginationConfig(
            posts_per_page=_posts_per_page(pagination_raw.get('posts_per_page', 5), name),
            list_page=pagination_raw['list_page'],
        )

    template_engine = options.get('template_engine')
    if template_engine:
        template_engine = str(template_engine).lstrip('.')

    return TaskConfig(
        src=settings['src'],
        dest=settings['dest'],
        url=settings['url'],
        layout=settings['layout'],
        name=name,
        data=options.get('data'),
        page_src=options.get('page_src'),
        template_engine=template_engine,
        pagination=pagination,
    )


class PagewrightSettings:
    """Load and manage Pagewright configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'src': 'posts',
        'dest': 'dist',
        'url': 'blog/posts/:title',
        'layout': 'templates/post.html',
        'log_dir': 'logs',
        'options': {},
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['pagewright.yml', 'pagewright.yaml', 'pagewright.json']

    def __init__(self, config_dir: str = None, config_path: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
            config_path: Explicit configuration file; skips the search when given.
        """
        self.config_dir = config_dir or os.getcwd()
        self.config_path = config_path
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.config_file_path = None
        self.overrides = {}

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings
        """
        if self.config_path:
            if not os.path.exists(self.config_path):
                raise ConfigurationError(f"Configuration file not found: {self.config_path}")
            config_file = self.config_path
        else:
            config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if loaded_settings:
                if not isinstance(loaded_settings, dict):
                    raise ConfigurationError(
                        f"Configuration file {config_file} must contain a mapping"
                    )
                # Merge with defaults, giving preference to loaded settings
                self.settings.update(loaded_settings)
                print(f"Loaded configuration from: {os.path.relpath(config_file)}")

        return copy.deepcopy(self.settings)

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        if file_ext not in ['.yml', '.yaml', '.json']:
            raise ConfigurationError(f"Unsupported config file format: {file_ext}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext == '.json':
                    return json.load(f) or {}
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file {config_path}: {e}") from e
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Error reading configuration file {config_path}: {e}") from e

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        sample_config = {
            'src': 'posts',
            'dest': 'dist',
            'url': 'blog/posts/:title',
            'layout': 'templates/post.html',
            'options': {
                'data': 'data/site.json',
                'page_src': 'pages',
                'template_engine': 'html',
                'pagination': {
                    'posts_per_page': 5,
                    'list_page': 'pages/index.html',
                },
            },
        }

        filename = f'pagewright.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# Pagewright Configuration File\n")
                    f.write("# Build settings\n")
                    f.write("src: posts            # markdown posts\n")
                    f.write("dest: dist            # output root\n")
                    f.write("url: blog/posts/:title  # :key segments come from post metadata\n")
                    f.write("layout: templates/post.html\n\n")
                    f.write("options:\n")
                    f.write("  # JSON merged into every template as `data`\n")
                    f.write("  data: data/site.json\n")
                    f.write("  # Extra pages rendered with the post collection\n")
                    f.write("  page_src: pages\n")
                    f.write("  template_engine: html\n")
                    f.write("  pagination:\n")
                    f.write("    posts_per_page: 5\n")
                    f.write("    list_page: pages/index.html\n")
                elif file_format == 'json':
                    json.dump(sample_config, f, indent=2)
                else:
                    raise ConfigurationError(f"Unsupported config file format: {file_format}")
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Error writing configuration file {config_path}: {e}") from e

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        known = TASK_KEYS + OPTION_ARGS + PAGINATION_ARGS + ['log_dir']
        self.overrides = {k: v for k, v in args_dict.items() if v is not None and k in known}
        return self._apply_overrides(self.settings)

    def _apply_overrides(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        merged = copy.deepcopy(settings)
        options = normalize_options(merged.get('options'))

        for key, value in self.overrides.items():
            if key in OPTION_ARGS:
                options[key] = value
            elif key in PAGINATION_ARGS:
                pagination = options.get('pagination')
                pagination = dict(pagination) if isinstance(pagination, dict) else {}
                pagination[key] = value
                options['pagination'] = pagination
            else:
                merged[key] = value

        merged['options'] = options
        return merged

    def task_configs(self, target: Optional[str] = None) -> List[TaskConfig]:
        """
        Build one TaskConfig per target to run.

        Args:
            target: Name of a single target to build; all targets when None

        Returns:
            List of TaskConfig in configuration order
        """
        targets = self.settings.get('targets')
        if not targets:
            if target:
                raise ConfigurationError(f"Unknown target '{target}': no targets are configured")
            return [build_task_config(self._apply_overrides(self.settings))]

        if not isinstance(targets, dict):
            raise ConfigurationError("'targets' must be a mapping of target names to settings")

        if target:
            if target not in targets:
                available = ', '.join(sorted(targets))
                raise ConfigurationError(f"Unknown target '{target}'. Known targets: {available}")
            names = [target]
        else:
            names = list(targets)

        configs = []
        for name in names:
            target_settings = targets[name] or {}
            raw = {key: target_settings.get(key, self.settings.get(key)) for key in TASK_KEYS}
            raw['options'] = merge_options(self.settings.get('options'), target_settings.get('options'))
            configs.append(build_task_config(self._apply_overrides(raw), name))
        return configs
