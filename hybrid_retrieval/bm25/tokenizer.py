"""
Tokenizer for BM25 text processing.

Tokenization pipeline:
1. Lowercase conversion
2. Replace every character that is not a letter, digit or whitespace with a space
3. Split on runs of whitespace
4. Drop empty tokens

Letters and digits are Unicode-aware, so "Größe", "日本語" and "٣" survive
intact. There is no stemming and no language-specific segmentation: "cats"
and "cat" are different terms, and CJK text without spaces is one token per
run. This is a known limitation, not a bug.
"""

from typing import List


def _normalize_char(ch: str) -> str:
    # str.isalnum() covers Unicode letters (L*) and digits (Nd, Nl, No)
    if ch.isalnum() or ch.isspace():
        return ch
    return " "


def tokenize(text: str) -> List[str]:
    """
    Tokenize text for BM25 scoring.
    
    Args:
        text: Input text to tokenize
        
    Returns:
        List of lowercase tokens in order of appearance
        
    Examples:
        >>> tokenize("The cat sat!")
        ['the', 'cat', 'sat']
        
        >>> tokenize("user@example.com")
        ['user', 'example', 'com']
        
        >>> tokenize("   ")
        []
    """
    if not text:
        return []
    
    normalized = "".join(_normalize_char(ch) for ch in text.lower())
    
    # str.split() with no argument splits on whitespace runs and drops empties
    return normalized.split()
