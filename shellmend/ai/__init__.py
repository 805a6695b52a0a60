"""
Assistant integration: prompt building, the Gemini client, fetching and
parsing of suggestions.
"""
from .parser import CommandSuggestion, SuggestionBatch, parse_suggestions
from .fallbacks import fallback_suggestions
from .fetcher import SuggestionFetcher

__all__ = [
    'CommandSuggestion', 'SuggestionBatch', 'parse_suggestions',
    'fallback_suggestions', 'SuggestionFetcher',
]
