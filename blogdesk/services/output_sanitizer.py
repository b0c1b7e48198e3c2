"""Clean-up of one-shot model output.

Models ignore formatting instructions often enough that every authoring
result goes through one of these before use. They never raise: output that
cannot be salvaged becomes an empty list, None or an empty string.
"""

import json
import re
import xml.etree.ElementTree as ET

_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*")
_XML_DECL_RE = re.compile(r"<\?xml.*?\?>", re.DOTALL)
_DOCTYPE_RE = re.compile(r"<!DOCTYPE[^>]*>", re.IGNORECASE | re.DOTALL)
_ICON_NOISE_RE = re.compile(r"[`'\".,;:!?()\[\]{}*]")

SVG_NS = "http://www.w3.org/2000/svg"
SVG_WRAPPER = (
    f'<svg xmlns="{SVG_NS}" viewBox="0 0 24 24" fill="none" stroke="currentColor" '
    'stroke-width="2" stroke-linecap="round" stroke-linejoin="round">{body}</svg>'
)
_SVG_SHAPES = ("<path", "<circle", "<rect", "<line", "<polyline", "<polygon", "<ellipse")


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers, keeping what they wrapped."""
    return _FENCE_RE.sub("", text).strip()


def extract_json_array(text: str) -> list[str]:
    """Return the first well-formed JSON array in ``text`` as strings."""
    cleaned = strip_code_fences(text)
    decoder = json.JSONDecoder()
    start = cleaned.find("[")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(cleaned, start)
        except json.JSONDecodeError:
            start = cleaned.find("[", start + 1)
            continue
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        start = cleaned.find("[", start + 1)
    return []


def clean_icon_name(text: str, allowed: list[str]) -> str | None:
    """Match the model's answer against the allowed icon names.

    Returns the canonical spelling from ``allowed``, or None when the answer
    is empty or names something outside the list.
    """
    cleaned = _ICON_NOISE_RE.sub(" ", strip_code_fences(text)).split()
    if not cleaned:
        return None
    by_lower = {name.lower(): name for name in allowed}
    return by_lower.get(cleaned[0].lower())


def is_well_formed_svg(svg: str) -> bool:
    try:
        root = ET.fromstring(svg)
    except ET.ParseError:
        return False
    return root.tag in ("svg", f"{{{SVG_NS}}}svg")


def clean_svg(text: str) -> str:
    """Reduce model output to one well-formed ``<svg>`` element, or ``""``."""
    svg = strip_code_fences(text)
    svg = _XML_DECL_RE.sub("", svg)
    svg = _DOCTYPE_RE.sub("", svg).strip()

    start = svg.find("<svg")
    end = svg.rfind("</svg>")
    if start != -1 and end != -1 and end > start:
        candidate = svg[start : end + len("</svg>")]
    elif start == -1 and any(shape in svg for shape in _SVG_SHAPES):
        candidate = SVG_WRAPPER.format(body=svg)
    else:
        return ""

    return candidate if is_well_formed_svg(candidate) else ""


def clean_summary(text: str) -> str:
    return strip_code_fences(text).strip().strip('"').strip()
