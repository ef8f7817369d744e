"""Display variables derived from accessibility preferences.

A renderer applies these as CSS custom properties on the root element.
"""

from __future__ import annotations

from voxmail.models import FontSize, UserPreferences

FONT_SCALES: dict[FontSize, float] = {
    FontSize.SMALL: 0.9,
    FontSize.MEDIUM: 1.0,
    FontSize.LARGE: 1.2,
}

FONT_PIXELS: dict[FontSize, int] = {
    FontSize.SMALL: 14,
    FontSize.MEDIUM: 16,
    FontSize.LARGE: 20,
}

HIGH_CONTRAST_VARIABLES: dict[str, str] = {
    "--background-color": "#000000",
    "--text-color": "#ffffff",
    "--link-color": "#ffff00",
    "--contrast-mode": "high",
}


def font_scale(size: FontSize) -> float:
    return FONT_SCALES.get(FontSize(size), 1.0)


def font_pixels(size: FontSize) -> str:
    return f"{FONT_PIXELS.get(FontSize(size), 16)}px"


def display_variables(preferences: UserPreferences) -> dict[str, str]:
    """CSS variables for the preferences. Contrast variables only when enabled."""
    variables = {"--font-scale": f"{font_scale(preferences.font_size):g}"}
    if preferences.high_contrast:
        variables.update(HIGH_CONTRAST_VARIABLES)
    return variables
