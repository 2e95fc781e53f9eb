# -*- coding: utf-8 -*-
"""Application constants."""

APP_NAME = "chart-roast"
APP_VERSION = "0.1.0"

DEFAULT_SETTINGS_FILE = "settings.json"

SUPPORTED_MEDIA_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")

SUFFIX_MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

# Wire keys of the feedback object, in display order.
FEEDBACK_FIELDS = ("strengths", "weaknesses", "suggestions", "roast", "plotCode")
LIST_FIELDS = ("strengths", "weaknesses", "suggestions")

BULLET = "• "

ANTHROPIC_API_URL = "https://api.anthropic.com/v1"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_MAX_TOKENS = 2048

SYSTEM_PROMPT = (
    "You are a data visualization expert. Your task is to analyze charts critically "
    '("roast" them), provide constructive feedback, and generate code for an improved '
    "version using Observable Plot (JavaScript). Respond ONLY with a valid JSON object "
    'containing the keys "strengths", "weaknesses", "suggestions", "roast", and "plotCode". '
    '"strengths", "weaknesses" and "suggestions" are arrays of short strings. "roast" is a '
    'short, witty critique of the chart as a single string. "plotCode" is a string of '
    "JavaScript code ready to be used with Observable Plot. Do not include any other text, "
    "explanations, or markdown formatting outside the JSON structure. Assume the data is "
    "implicitly available or part of the chart context; focus on the plotting code itself."
)

USER_PROMPT = (
    "Analyze this chart. Provide feedback (strengths, weaknesses, suggestions), a roast, "
    "and generate JavaScript code for an improved version using Observable Plot. "
    "Respond strictly in the JSON format specified in the system prompt."
)
