"""Round content generators for the fill-in-the-blank and matching games."""

import math
import random
import re

from .config import (
    BLANK_RATIOS, BLANK_PLACEHOLDER, SKIP_WORDS, MATCHING_TEXT_LIMIT
)
from .models import ScriptureCard


def _clean_word(word: str) -> str:
    return re.sub(r'[^a-zA-Z]', '', word)


def blank_count_for(word_count: int, difficulty: str) -> int:
    """Number of blanks a passage of word_count words gets at a difficulty."""
    if difficulty not in BLANK_RATIOS:
        raise ValueError(f"Unknown difficulty: {difficulty}")
    ratio, minimum = BLANK_RATIOS[difficulty]
    return max(math.floor(word_count * ratio), minimum)


def generate_blanks(text: str, difficulty: str, rng: random.Random = None) -> tuple[str, list[str]]:
    """Replace a difficulty-dependent number of words with blanks.

    Returns (display_text, blanks) where blanks lists the removed words in the
    order their placeholders appear.
    """
    rng = rng or random
    words = text.split(' ')
    blank_count = blank_count_for(len(words), difficulty)

    # Only meaningful words are eligible
    candidates = []
    for i, word in enumerate(words):
        clean = _clean_word(word).lower()
        if len(clean) > 2 and clean not in SKIP_WORDS:
            candidates.append(i)

    chosen = set(rng.sample(candidates, min(blank_count, len(candidates))))

    blanks = []
    display = []
    for i, word in enumerate(words):
        if i in chosen:
            blanks.append(word)
            display.append(BLANK_PLACEHOLDER)
        else:
            display.append(word)
    return ' '.join(display), blanks


def get_hint(word: str) -> str:
    """Mask a word to first letter + underscores + last letter."""
    if len(word) <= 2:
        return word
    clean = _clean_word(word)
    if len(clean) < 2:
        return word
    return clean[0] + '_' * (len(clean) - 2) + clean[-1]


def shuffle_list(items: list, rng: random.Random = None) -> list:
    """Return a Fisher-Yates shuffled copy of items."""
    rng = rng or random
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def truncate_text(text: str, limit: int = MATCHING_TEXT_LIMIT) -> str:
    if len(text) > limit:
        return text[:limit] + '...'
    return text


def generate_matching_pairs(cards: list[ScriptureCard],
                            rng: random.Random = None) -> tuple[list[dict], list[dict]]:
    """Build independently shuffled reference and scripture columns.

    Items sharing a card_id form the correct pair.
    """
    references = shuffle_list([
        {'id': f'ref-{c.id}', 'text': c.reference, 'card_id': c.id}
        for c in cards
    ], rng)
    scriptures = shuffle_list([
        {'id': f'scr-{c.id}', 'text': truncate_text(c.text), 'card_id': c.id}
        for c in cards
    ], rng)
    return references, scriptures
