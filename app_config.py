"""
Application configuration settings
Do not modify these values once your application has been distributed to users.
This file centralises brand, paths, timeline defaults and dev seeding.
"""

from __future__ import annotations
import os
import platform
from pathlib import Path

DEV_MODE = True
# Seed scene used on startup (mirrors the layers a fresh editor session shows)
DEV_LAYER = [
    {
        "name": "Rectangle 1",
        "shape": "rectangle",
        "properties": {
            "x": 100, "y": 100, "width": 200, "height": 100,
            "color": "#3b82f6",
        },
    },
    {
        "name": "Circle 1",
        "shape": "circle",
        "properties": {
            "x": 300, "y": 200, "width": 80, "height": 80,
            "color": "#ef4444",
        },
    },
]

# ───────────────────────────────────────────────────────────────────────────────
# Tweenr identity / branding
# ───────────────────────────────────────────────────────────────────────────────
APP_NAME = "Tweenr"
APP_VERSION = "0.1.0"
COMPANY_NAME = "Digi Monsters"

# Reverse-DNS App ID (used in About/QSettings/diagnostics)
APP_ID = "uk.digimonsters.tweenr"

# Organization identifiers (for QSettings, folders, About box)
ORG_NAME = "Digi Monsters"       # human readable
ORG_DIRNAME = "DigiMonsters"     # filesystem safe (no spaces)
ORG_DOMAIN = "digimonsters.uk"

# Code & distribution naming
REPO_NAME = "dm_tweenr"
PACKAGE_NAME = "tweenr"          # Python import package
DIST_NAME = "dm-tweenr"

REPO_URL = "https://github.com/thedigimonsters/dm_tweenr"
ISSUE_URL = f"{REPO_URL}/issues"

TAGLINE = "Keyframes in, motion out."

BUILD_COMMIT = os.getenv("TWEENR_BUILD_COMMIT", "")[:7]
BUILD_CHANNEL = os.getenv("TWEENR_BUILD_CHANNEL", "dev")  # dev/beta/stable


def version_string() -> str:
    """Human-friendly version string for About dialogs and logs."""
    meta = f"+{BUILD_COMMIT}" if BUILD_COMMIT else ""
    chan = f" ({BUILD_CHANNEL})" if BUILD_CHANNEL and BUILD_CHANNEL != "stable" else ""
    return f"{APP_VERSION}{meta}{chan}"


# ───────────────────────────────────────────────────────────────────────────────
# Timeline defaults
# ───────────────────────────────────────────────────────────────────────────────
DEFAULT_DURATION_S = 5.0
TIMECODE_FPS = 30                  # MM:SS:FF display rate
ENGINE_UPDATE_INTERVAL_MS = 16     # ~60 Hz engine clock ticks
# Easing applied to every scheduled segment. Linear keeps the engine's
# on-screen motion identical to the reconciled values.
ENGINE_EASING = "Linear"


# ───────────────────────────────────────────────────────────────────────────────
# User data locations (settings, logs)
# ───────────────────────────────────────────────────────────────────────────────
def _appdata_base() -> Path:
    system = platform.system()
    if system == "Windows":
        base = os.getenv("APPDATA") or (Path.home() / "AppData" / "Roaming")
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
    return Path(base) / ORG_DIRNAME / APP_NAME


APPDATA_DIR = _appdata_base()
LOG_DIR = APPDATA_DIR / "logs"


def ensure_app_dirs() -> None:
    """Create required folders if they don't exist."""
    for p in (APPDATA_DIR, LOG_DIR):
        p.mkdir(parents=True, exist_ok=True)


# ───────────────────────────────────────────────────────────────────────────────
# QSettings bootstrap (call once during startup)
# ───────────────────────────────────────────────────────────────────────────────
def apply_qsettings_org() -> None:
    """
    Apply org/app metadata for QSettings. Call early in startup,
    before constructing your first QSettings instance.
    """
    try:
        from PySide6.QtCore import QCoreApplication
        QCoreApplication.setOrganizationName(ORG_NAME)
        QCoreApplication.setOrganizationDomain(ORG_DOMAIN)
        QCoreApplication.setApplicationName(APP_NAME)
    except ImportError:
        # Safe to import this module in non-Qt contexts
        pass


# ───────────────────────────────────────────────────────────────────────────────
# Defaults (read by settings wrapper; safe to change before shipping)
# ───────────────────────────────────────────────────────────────────────────────
DEFAULTS = {
    "timeline": {
        "duration_s": DEFAULT_DURATION_S,
        "fps": TIMECODE_FPS,
        "update_interval_ms": ENGINE_UPDATE_INTERVAL_MS,
        "easing": ENGINE_EASING,
    },
    "hotkeys": {
        "play_pause": "Space",
        "go_start": "Home",
        "go_end": "End",
        "step_prev": "Left",
        "step_next": "Right",
        "add_keyframe": "K",
    },
}


def banner() -> str:
    return (
        f"{APP_NAME} {version_string()}  •  {APP_ID}\n"
        f"Vendor: {COMPANY_NAME}  •  Repo: {REPO_URL}\n"
        f"Data: {APPDATA_DIR}"
    )


if __name__ == "__main__":
    ensure_app_dirs()
    print(banner())
