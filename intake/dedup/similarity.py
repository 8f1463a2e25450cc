"""
字符串相似度引擎 — Jaro-Winkler。

用于姓名 / MRN 这类短字符串的近似匹配：
- 容忍拼写错误（John / Jon）、相邻字母换位（Smith / Smiht）
- 对共同前缀加分（人名很少在开头拼错）

区分大小写；需要忽略大小写时由调用方先 lower()。
"""

PREFIX_SCALE = 0.1
MAX_PREFIX = 4


def jaro_similarity(a: str, b: str) -> float:
    """Jaro 基础分，不含前缀加分。"""
    len1, len2 = len(a), len(b)

    match_distance = max(len1, len2) // 2 - 1
    if match_distance < 0:
        return 0.0

    a_matched = [False] * len1
    b_matched = [False] * len2
    matches = 0

    for i, ch in enumerate(a):
        start = max(0, i - match_distance)
        end = min(i + match_distance + 1, len2)
        for j in range(start, end):
            if not b_matched[j] and b[j] == ch:
                a_matched[i] = True
                b_matched[j] = True
                matches += 1
                break

    if matches == 0:
        return 0.0

    a_seq = [ch for ch, hit in zip(a, a_matched) if hit]
    b_seq = [ch for ch, hit in zip(b, b_matched) if hit]
    transpositions = sum(1 for x, y in zip(a_seq, b_seq) if x != y)

    return (
        matches / len1
        + matches / len2
        + (matches - transpositions / 2) / matches
    ) / 3


def common_prefix_length(a: str, b: str, limit: int = MAX_PREFIX) -> int:
    length = 0
    for x, y in zip(a[:limit], b[:limit]):
        if x != y:
            break
        length += 1
    return length


def similarity(a: str, b: str) -> float:
    """
    返回 [0, 1] 之间的相似度。

    - 完全相同（包括两个空串）→ 1.0
    - 只有一个是空串 → 0.0
    - 其余：Jaro 基础分 + 前缀加分（前缀最多算 4 个字符）
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    base = jaro_similarity(a, b)
    prefix = common_prefix_length(a, b)
    return base + prefix * PREFIX_SCALE * (1 - base)
