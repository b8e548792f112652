# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging
from textblob import TextBlob

logger = logging.getLogger(__name__)

# Polarity (-1.0 .. 1.0) is stretched onto the integer scale the threshold uses
SCORE_SCALE = 5


def score(text: str) -> int:
    """Integer sentiment of a journal thought; any scorer failure counts as neutral."""
    if not text or not text.strip():
        return 0
    try:
        polarity = float(TextBlob(text).sentiment.polarity)
    except Exception as e:
        logger.warning(f"⚠️ Sentiment scoring failed: {e}")
        return 0
    return int(round(polarity * SCORE_SCALE))
