"""
Utility functions and helpers for jobwatch.

- **logger.py**: Centralized logging with coloured prompt_toolkit console
  output and a per-session rotating log file. Silences chatty Discord and HTTP
  client loggers.
- **text_utils.py**: Grapheme-cluster aware truncation for report summaries.
"""
