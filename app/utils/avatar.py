import base64
from typing import Optional

AVATAR_COLORS = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
    "#F8C471", "#82E0AA", "#F1948A", "#85C1E9", "#D7BDE2",
]
DEFAULT_AVATAR_SIZE = 200


def initials_for(username: str) -> str:
    return "".join(word[0].upper() for word in username.split() if word)[:2]


def background_color_for(username: str) -> str:
    return AVATAR_COLORS[sum(ord(char) for char in username) % len(AVATAR_COLORS)]


def text_color_for(background: str) -> str:
    rgb = int(background[1:], 16)
    r, g, b = (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF
    brightness = (r * 299 + g * 587 + b * 114) / 1000
    return "#000000" if brightness > 128 else "#FFFFFF"


def generate_avatar(username: str, size: int = DEFAULT_AVATAR_SIZE) -> str:
    """Render an initials avatar as a base64 SVG data URL."""
    background = background_color_for(username)
    svg = (
        f'<svg width="{size}" height="{size}" xmlns="http://www.w3.org/2000/svg">'
        f'<rect width="100%" height="100%" fill="{background}" rx="{size / 8:g}"/>'
        f'<text x="50%" y="50%" font-family="Arial, sans-serif" font-size="{size / 3:g}" '
        f'font-weight="bold" text-anchor="middle" dominant-baseline="central" '
        f'fill="{text_color_for(background)}">{initials_for(username)}</text>'
        f"</svg>"
    )
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def avatar_for(username: str, profile_pic: Optional[str]) -> str:
    return profile_pic or generate_avatar(username)
