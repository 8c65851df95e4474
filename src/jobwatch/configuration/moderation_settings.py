"""
Static moderation policy: who the bot is and where reports go.

The compiled-in defaults describe the communities this bot was built for. A
``moderation`` section in ``config/app_config.yml`` may replace them, e.g.::

    moderation:
      self_user_id: 1314997214866571284
      summary_max_graphemes: 512
      report_channels:
        145457131640848384: 335451227028717568
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from jobwatch.configuration.app_configuration import AppConfig, ConfigurationError

SELF_USER_ID = 1314997214866571284

# community (guild) id -> report channel id
DEFAULT_REPORT_CHANNELS: Mapping[int, int] = MappingProxyType({
    145457131640848384: 335451227028717568,  # bot testing server
    238666723824238602: 1315930244682743839,  # progdisc
})

SUMMARY_MAX_GRAPHEMES = 512


@dataclass(frozen=True, slots=True)
class ModerationConfig:
    """
    Immutable moderation policy shared by every event handler.

    Attributes:
        self_user_id: Account id of this bot; its own messages are never moderated.
        channel_mapping: Community id to report channel id. Communities not
            listed are not moderated; there is no fallback channel.
        summary_max_graphemes: Maximum user-perceived characters of message
            text copied into a report.
    """

    self_user_id: int = SELF_USER_ID
    channel_mapping: Mapping[int, int] = field(default_factory=lambda: DEFAULT_REPORT_CHANNELS)
    summary_max_graphemes: int = SUMMARY_MAX_GRAPHEMES

    def __post_init__(self) -> None:
        # Freeze whatever mapping the caller passed in
        object.__setattr__(self, "channel_mapping", MappingProxyType(dict(self.channel_mapping)))
        if self.summary_max_graphemes <= 0:
            raise ConfigurationError("summary_max_graphemes must be positive")

    def report_channel_for(self, community_id: int) -> int | None:
        """Return the report channel for ``community_id`` or None when unmoderated."""
        return self.channel_mapping.get(community_id)

    @classmethod
    def from_app_config(cls, app_config: AppConfig) -> "ModerationConfig":
        """Build the policy from compiled-in defaults overlaid with the YAML section."""
        section = app_config.moderation
        try:
            self_user_id = int(section.get("self_user_id", SELF_USER_ID))
            summary_max = int(section.get("summary_max_graphemes", SUMMARY_MAX_GRAPHEMES))
            channels = _parse_channel_mapping(section.get("report_channels"))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"invalid moderation configuration: {exc}") from exc

        return cls(
            self_user_id=self_user_id,
            channel_mapping=channels,
            summary_max_graphemes=summary_max,
        )


def _parse_channel_mapping(raw: Any) -> Mapping[int, int]:
    if raw is None:
        return DEFAULT_REPORT_CHANNELS
    if not isinstance(raw, dict):
        raise TypeError("'report_channels' must map community ids to channel ids")
    return {int(community): int(channel) for community, channel in raw.items()}
