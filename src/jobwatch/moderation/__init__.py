"""
Moderation decisions and reports.

- **handler.py**: ``ModerationHandler`` filters, classifies and reports one
  message at a time, containing every per-message failure.
- **report_embed.py**: Builds ``Report`` objects and renders them as embeds.
"""
