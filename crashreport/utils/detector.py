from typing import Iterable

from crashreport.config import ERROR_KEYWORDS


def has_signal(report: str, keywords: Iterable[str] = ERROR_KEYWORDS) -> bool:
    """
    粗粒度判断报告里是否有值得上报的内容。
    大小写不敏感的子串匹配，不考虑单词边界，误报可以接受。
    """
    text = (report or "").lower()
    return any(k.lower() in text for k in keywords)
