import functools
import re
from typing import Callable, List, Optional, Union


_TOKEN_RE = re.compile(r"\d+|[A-Za-z]+")

# Pre-release markers sort below the release they qualify.
_PRERELEASE_RANK = {
    "dev": 0,
    "alpha": 1,
    "a": 1,
    "beta": 2,
    "b": 2,
    "pre": 3,
    "rc": 4,
}
_WORD_RANK = len(_PRERELEASE_RANK)

Token = Union[int, str]


def is_undefined(version: Optional[str]) -> bool:
    """
    True for a missing version. "0" is a defined version.
    """
    return version is None


def _tokenize(version: str) -> List[str]:
    text = version.strip()
    if text[:1] in ("v", "V") and text[1:2].isdigit():
        text = text[1:]
    return _TOKEN_RE.findall(text)


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _compare_tokens(a: str, b: str) -> int:
    a_num = a.isdigit()
    b_num = b.isdigit()

    if a_num and b_num:
        # Leading zeros make the component a decimal fraction ("01" < "1").
        if (a.startswith("0") or b.startswith("0")) and a != b:
            return _cmp(a, b)
        return _cmp(int(a), int(b))
    if a_num:
        return 1
    if b_num:
        return -1

    a_low = a.lower()
    b_low = b.lower()
    a_rank = _PRERELEASE_RANK.get(a_low, _WORD_RANK)
    b_rank = _PRERELEASE_RANK.get(b_low, _WORD_RANK)
    if a_rank != b_rank:
        return _cmp(a_rank, b_rank)
    return _cmp(a_low, b_low)


def compare_versions(a: str, b: str) -> int:
    """
    Three-way comparison of two version strings.

    Returns -1, 0 or 1. Components are compared numerically where both are
    numbers; a trailing word such as "beta" or "rc" ranks below the bare
    release ("1.0beta" < "1.0"), while a trailing number ranks above it
    ("1.0.1" > "1.0").
    """
    a_tokens = _tokenize(a)
    b_tokens = _tokenize(b)

    for a_tok, b_tok in zip(a_tokens, b_tokens):
        result = _compare_tokens(a_tok, b_tok)
        if result:
            return result

    if len(a_tokens) == len(b_tokens):
        return 0

    if len(a_tokens) > len(b_tokens):
        return 1 if a_tokens[len(b_tokens)].isdigit() else -1
    return -1 if b_tokens[len(a_tokens)].isdigit() else 1


def compare_optional_versions(a: Optional[str], b: Optional[str]) -> int:
    """
    Like compare_versions, but an undefined version ranks below any defined one.
    """
    if is_undefined(a) and is_undefined(b):
        return 0
    if is_undefined(a):
        return -1
    if is_undefined(b):
        return 1
    return compare_versions(a, b)


version_key: Callable[[str], object] = functools.cmp_to_key(compare_versions)
