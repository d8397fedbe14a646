"""Format renderers - brief, email, detailed report and podcast."""

from .base import PLACEHOLDER_TEXT, TextRenderer
from .brief_renderer import BriefRenderer
from .email_renderer import EmailRenderer
from .report_renderer import DetailedReportRenderer
from .podcast_renderer import PodcastRenderer

__all__ = [
    "PLACEHOLDER_TEXT",
    "TextRenderer",
    "BriefRenderer",
    "EmailRenderer",
    "DetailedReportRenderer",
    "PodcastRenderer",
]
