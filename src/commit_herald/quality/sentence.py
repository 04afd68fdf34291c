import re
from typing import List

# Maximal runs ending in sentence punctuation; trailing text without punctuation is not a sentence.
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")

def split_sentences(text: str) -> List[str]:
    """
    Splits text into sentences, keeping the punctuation and the whitespace before each one.
    """
    if not text:
        return []
    return _SENTENCE_RE.findall(text)

def truncate_at_sentence(text: str, budget: int) -> str:
    """
    Longest prefix of whole sentences that fits in `budget`. Empty if not even the first fits.
    """
    kept = ""
    for sentence in split_sentences(text.lstrip()):
        if len(kept + sentence) > budget:
            break
        kept += sentence
    return kept.strip()

def truncate_at_word(text: str, budget: int) -> str:
    kept = ""
    for word in text.split():
        candidate = f"{kept} {word}" if kept else word
        if len(candidate) > budget:
            break
        kept = candidate
    return kept

def fit_to_budget(text: str, budget: int) -> str:
    """
    Deterministic length guarantee: whole sentences if any fit, else whole words.
    A single word longer than the budget is cut hard so the result is never empty.
    """
    text = text.strip()
    if len(text) <= budget:
        return text
    result = truncate_at_sentence(text, budget)
    if not result:
        result = truncate_at_word(text, budget)
    if not result:
        result = text[:budget].strip()
    return result
