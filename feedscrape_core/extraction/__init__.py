"""
Atomized access to field extraction
"""

from .strategies import StrategyChain, StrategyHit
from .text import clean_text, extract_text, sanitize_text
from .engagement import extract_engagement, extract_all_metrics, engagement_chain
from .timestamps import extract_temporal_expression, temporal_chain
from .field_extractor import FieldExtractor, attach_timestamps

__all__ = [
    'StrategyChain',
    'StrategyHit',
    'clean_text',
    'extract_text',
    'sanitize_text',
    'extract_engagement',
    'extract_all_metrics',
    'engagement_chain',
    'extract_temporal_expression',
    'temporal_chain',
    'FieldExtractor',
    'attach_timestamps',
]
