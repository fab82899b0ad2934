from __future__ import annotations

SVG_MEDIA_TYPE = "image/svg+xml"
NO_CACHE_HEADERS = {"Cache-Control": "max-age=0, no-cache, no-store, must-revalidate"}

_TEMPLATE = """<?xml version="1.0"?>
<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="20">
<rect width="30" height="20" fill="#555"/>
<rect x="30" width="{rec_width}" height="20" fill="#4c1"/>
<rect rx="3" width="80" height="20" fill="transparent"/>
	<g fill="#fff" text-anchor="middle"
    font-family="DejaVu Sans,Verdana,Geneva,sans-serif" font-size="11">
	    <text x="15" y="14">hits</text>
	    <text x="{text_x}" y="14">{count}</text>
	</g>
</svg>"""

_BASE_WIDTH = 80
_BASE_REC_WIDTH = 50
_BASE_TEXT_X = 55
# dígitos que caben sin ensanchar la caja
_FIT_DIGITS = 5


def badge_geometry(count: int) -> tuple[int, int, int]:
    """(width, rec_width, text_x) para el número de dígitos de `count`."""
    extra = max(0, len(str(count)) - _FIT_DIGITS)
    return _BASE_WIDTH + 6 * extra, _BASE_REC_WIDTH + 6 * extra, _BASE_TEXT_X + 3 * extra


def render_badge(count: int) -> str:
    width, rec_width, text_x = badge_geometry(count)
    return _TEMPLATE.format(width=width, rec_width=rec_width, text_x=text_x, count=count)
