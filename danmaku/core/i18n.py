from __future__ import annotations

import re
from typing import Any, Mapping

_SUPPORTED = {"zh", "en"}
_FALLBACK = "zh"

_LANG_RE = re.compile(r"^[a-zA-Z]{1,8}(?:-[a-zA-Z0-9]{1,8})*$")


def infer_locale_from_headers(headers: Mapping[str, str], *, default_locale: str, locale_header: str) -> str:
    explicit = headers.get(locale_header, "") or headers.get(locale_header.lower(), "")
    explicit = explicit.strip().lower()
    if explicit:
        if explicit.startswith("zh"):
            return "zh"
        if explicit.startswith("en"):
            return "en"

    accept = headers.get("accept-language", "") or headers.get("Accept-Language", "")
    accept = accept.strip()
    if accept:
        best = _best_match_accept_language(accept)
        if best in _SUPPORTED:
            return best

    return default_locale if default_locale in _SUPPORTED else _FALLBACK


def _best_match_accept_language(value: str) -> str:
    candidates: list[tuple[str, float]] = []
    for part in value.split(","):
        lang_part = part.strip()
        if not lang_part:
            continue
        lang, q = _parse_lang_q(lang_part)
        if not lang:
            continue
        if lang in _SUPPORTED or lang.split("-")[0] in _SUPPORTED:
            candidates.append((lang.split("-")[0], q))
    if not candidates:
        return ""
    candidates.sort(key=lambda x: x[1], reverse=True)
    return candidates[0][0]


def _parse_lang_q(part: str) -> tuple[str, float]:
    if ";" not in part:
        lang = part.strip()
        if _LANG_RE.match(lang):
            return lang.lower(), 1.0
        return "", 0.0
    lang_raw, params_raw = part.split(";", 1)
    lang = lang_raw.strip()
    if not _LANG_RE.match(lang):
        return "", 0.0
    q = 1.0
    for p in params_raw.split(";"):
        p = p.strip()
        if p.startswith("q="):
            try:
                q = float(p[2:])
            except ValueError:
                q = 0.0
    return lang.lower(), q


_MESSAGES: dict[str, dict[str, str]] = {
    "zh": {
        "idle": "请先选择文件",
        "matching": "正在匹配",
        "selecting": "正在选择匹配结果",
        "match_failed": "匹配失败",
        "fetching_comments": "正在获取弹幕",
        "comments_failed": "弹幕获取失败",
        "ready": "[{precision}] [{episode_id}] {anime_title} {episode_title} -> {comment_count} 条弹幕",
        "precision_exact": "精确",
        "precision_fuzzy": "模糊",
        "read_error": "无法读取所选文件。",
        "match_service_error": "匹配服务暂时不可用。",
        "no_match_found": "未找到匹配的剧集。",
        "comment_service_error": "弹幕服务暂时不可用。",
        "playback_error": "播放器初始化失败。",
        "request_invalid": "请求无效。",
        "not_found": "资源不存在。",
        "method_not_allowed": "不支持该请求方法。",
        "playback_not_ready": "尚无可播放的内容。",
        "internal_error": "服务内部错误。",
    },
    "en": {
        "idle": "Awaiting file selection",
        "matching": "Matching",
        "selecting": "Selecting match",
        "match_failed": "Match failed",
        "fetching_comments": "Fetching comments",
        "comments_failed": "Failed to fetch comments",
        "ready": "[{precision}] [{episode_id}] {anime_title} {episode_title} -> {comment_count} comments",
        "precision_exact": "exact",
        "precision_fuzzy": "fuzzy",
        "read_error": "The selected file could not be read.",
        "match_service_error": "The matching service is unavailable.",
        "no_match_found": "No matching episode was found.",
        "comment_service_error": "The comment service is unavailable.",
        "playback_error": "The player could not be prepared.",
        "request_invalid": "Invalid request.",
        "not_found": "Resource not found.",
        "method_not_allowed": "Method not allowed.",
        "playback_not_ready": "Nothing is ready for playback yet.",
        "internal_error": "Internal service error.",
    },
}


def normalize_locale(locale: str) -> str:
    return locale if locale in _SUPPORTED else _FALLBACK


def t(locale: str, key: str, **params: Any) -> str:
    lang = normalize_locale(locale)
    template = _MESSAGES.get(lang, {}).get(key, _MESSAGES[_FALLBACK].get(key, ""))
    if params:
        return template.format(**params)
    return template
