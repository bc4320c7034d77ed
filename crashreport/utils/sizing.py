"""按 UTF-8 字节计算长度与截断，GitHub 和报告的大小上限都按字节算"""


def byte_length(text: str) -> int:
    return len(text.encode("utf-8", errors="replace"))


def cut_bytes(text: str, size: int) -> str:
    """保留前 size 个字节，落在多字节字符中间时丢掉不完整的尾部"""
    data = text.encode("utf-8", errors="replace")
    if len(data) <= size:
        return text
    return data[:max(0, size)].decode("utf-8", errors="ignore")
