"""
Configuration parser for Forward Countdown.

Handles TOML file parsing. Every setting has a default, so the application
runs without a configuration file.
"""

import tomllib
import os
import sys
from pathlib import Path
from dataclasses import dataclass, field, fields
from typing import Optional

from .event_storage import get_default_storage_file


@dataclass
class AdsConfig:
    """Configuration for the sponsored item side channel."""
    enabled: bool = False
    endpoint: str = ""          # HTTP endpoint returning one sponsored item as JSON
    ad_unit_id: str = ""
    cache_size: int = 5         # Maximum number of prefetched items kept
    preload_count: int = 3      # Items fetched on first use
    interval: int = 10          # Show an item after every N events
    timeout: float = 10.0       # Seconds before a fetch counts as failed


@dataclass
class ColorsConfig:
    """Configuration for UI colors."""
    toast_success_background: str = "#7366f2"   # Matches the app's purple accent
    toast_error_background: str = "#d13b40"
    toast_text: str = "#ffffff"
    accent: str = "#7366f2"
    secondary_text: str = "rgba(0, 0, 0, 0.6)"
    row_background: str = "#ffffff"
    row_selected_background: str = "#ece9fd"
    sponsored_background: str = "#fafafa"


@dataclass
class LabelsConfig:
    """Configuration for UI labels and notification texts."""
    window_title: str = "Forward"
    filter_future: str = "Future"
    filter_past: str = "Past"

    button_new_event: str = "New Event"
    button_select: str = "Select"
    button_done: str = "Done"
    button_delete_selected: str = "Delete"
    button_save: str = "Save"
    button_cancel: str = "Cancel"
    button_delete: str = "Delete"

    dialog_new_event: str = "New Event"
    dialog_edit_event: str = "Edit Event"
    field_title: str = "Title:"
    field_emoji: str = "Emoji:"
    field_date: str = "Date:"
    field_location: str = "Location:"
    field_notes: str = "Notes:"

    confirm_delete_title: str = "Delete Event"
    confirm_delete_text: str = "Delete \"{}\"? This cannot be undone."
    confirm_delete_selected_text: str = "Delete {} selected events? This cannot be undone."

    toast_event_created: str = "Event created successfully"
    toast_event_create_failed: str = "Failed to create event. Please try again."
    toast_event_updated: str = "Event updated"
    toast_event_update_failed: str = "Could not update event. Please try again."
    toast_event_deleted: str = "Event deleted"
    toast_events_deleted: str = "Events deleted"
    toast_event_delete_failed: str = "Could not delete event. Please try again."
    toast_events_delete_failed: str = "Could not delete selected events. Please try again."
    toast_select_events: str = "Select events to delete"

    no_events_future: str = "No upcoming events"
    no_events_past: str = "No past events"
    sponsored_label: str = "Sponsored"
    day_singular: str = "day"
    day_plural: str = "days"


def _load_section(section_cls, data: dict):
    """Build a config dataclass from a TOML table, ignoring unknown keys."""
    known = {f.name for f in fields(section_cls)}
    for key in data:
        if key not in known:
            print(f"DEBUG: Ignoring unknown config key '{key}' in {section_cls.__name__}",
                  file=sys.stderr)
    return section_cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class Config:
    """Main configuration container for Forward Countdown."""

    storage_file: Path
    timezone: str = ""                # Empty: use the system timezone
    toast_duration: float = 2.5       # Seconds a notification stays visible
    ads: AdsConfig = field(default_factory=AdsConfig)
    colors: ColorsConfig = field(default_factory=ColorsConfig)
    labels: LabelsConfig = field(default_factory=LabelsConfig)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'forward-countdown' / 'forward-countdown.toml'

    @classmethod
    def get_default_storage_path(cls) -> Path:
        """Get the default events file path."""
        return get_default_storage_file()

    @classmethod
    def default(cls) -> 'Config':
        return cls(storage_file=cls.get_default_storage_path())

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from TOML file.

        A missing default file yields the defaults; a missing explicit
        path is an error.
        """
        if config_path is None:
            config_path = cls.get_default_config_path()
            if not config_path.exists():
                return cls.default()
        elif not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        # Parse General section
        general = data.get('General', {})
        storage_file_str = general.get('storage_file', str(cls.get_default_storage_path()))
        storage_file = Path(os.path.expanduser(storage_file_str))

        toast_duration = float(general.get('toast_duration', 2.5))
        if toast_duration <= 0:
            raise ValueError(f"toast_duration must be positive, got {toast_duration}")

        ads = _load_section(AdsConfig, data.get('Ads', {}))
        if ads.cache_size < 1 or ads.interval < 1:
            raise ValueError("Ads cache_size and interval must be at least 1")

        return cls(
            storage_file=storage_file,
            timezone=general.get('timezone', ''),
            toast_duration=toast_duration,
            ads=ads,
            colors=_load_section(ColorsConfig, data.get('Colors', {})),
            labels=_load_section(LabelsConfig, data.get('Labels', {})),
        )
