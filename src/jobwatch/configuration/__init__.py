"""
Configuration management for jobwatch.

- **app_configuration.py**: Optional YAML file (``config/app_config.yml``)
  loaded under a shared file lock. Unreadable or malformed files raise
  ``ConfigurationError`` at start-up.
- **ai_settings.py**: Typed accessors for the ``ai_settings`` section.
- **moderation_settings.py**: Immutable moderation policy (self id, report
  channel mapping, summary length) with compiled-in defaults.
"""
