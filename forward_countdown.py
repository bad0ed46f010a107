#!/usr/bin/env python3
"""
Forward Countdown - a PySide6 desktop tracker for upcoming events.

This is the main entry point for the application.
"""

import sys
import argparse
from pathlib import Path

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt

from forward.config import Config
from forward.network_worker import shutdown_network_worker
from forward.timezone_utils import set_timezone


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Forward Countdown - count down the days to the things you look forward to"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )
    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    # Load configuration
    try:
        config = Config.load(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        print("\nExample configuration:")
        print("""
[General]
storage_file = ~/.local/share/forward-countdown/events.json
timezone = Europe/Amsterdam
toast_duration = 2.5

[Ads]
enabled = false
endpoint = https://ads.example.com/native
""")
        sys.exit(1)
    except Exception as e:
        print(f"Error loading configuration: {e}")
        sys.exit(1)

    set_timezone(config.timezone)

    if args.debug:
        print(f"Loaded configuration from: {args.config or Config.get_default_config_path()}")
        print(f"  Storage file: {config.storage_file}")
        print(f"  Sponsored items: {'on' if config.ads.enabled else 'off'}")

    # Enable high DPI scaling
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    # Create application
    app = QApplication(sys.argv)
    app.setApplicationName("Forward Countdown")
    app.setApplicationVersion("0.1")
    app.setOrganizationName("forward")
    app.setStyle("Fusion")

    # Imported after QApplication exists
    from forward_gui.main_window import MainWindow

    window = MainWindow(config)
    window.show()

    exit_code = app.exec()
    shutdown_network_worker()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
