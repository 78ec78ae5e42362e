"""
Text layout primitives for freehand drawing.

Greedy word wrap against reportlab font metrics, centering and box sizing.
"""

from typing import Callable, List

from reportlab.pdfbase.pdfmetrics import stringWidth

# (text, font_name, size) -> width in points
WidthFunction = Callable[[str, str, float], float]


def measure(text: str, font_name: str, size: float) -> float:
    """Width of text in points for a registered font."""
    return stringWidth(text, font_name, size)


def wrap_text(
    text: str,
    font_name: str,
    size: float,
    max_width: float,
    width_of: WidthFunction = measure,
) -> List[str]:
    """
    Greedy word wrap.

    Words are joined with single spaces until the next word would push the
    line past max_width. A word that alone is wider than max_width gets a
    line of its own and is never split.

    Returns:
        At least one line; [""] for empty input.
    """
    lines: List[str] = []
    current = ""

    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and width_of(candidate, font_name, size) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate

    if current or not lines:
        lines.append(current)
    return lines


def box_height(line_count: int, line_height: float, padding: float) -> float:
    """Height of a bordered box that fits line_count lines exactly."""
    return line_count * line_height + padding


def center_x(text_width: float, container_width: float, container_x: float) -> float:
    """X offset that centers text in a container, never left of its start."""
    return max(container_x, container_x + (container_width - text_width) / 2)
