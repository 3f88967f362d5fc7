# recipe_storage/core/logging.py
# 로깅 초기화 — 각 모듈은 logging.getLogger(__name__) 만 쓴다
# extra={...} 로 넘긴 필드는 메시지 뒤에 key=value 로 붙는다

from __future__ import annotations
import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_configured = False

# LogRecord 기본 속성 (extra 가 아닌 것)
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class ExtraFieldsFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = [f"{k}={v}" for k, v in record.__dict__.items() if k not in _RESERVED]
        if not extras:
            return line
        # 예외 트레이스가 붙은 경우 첫 줄 뒤에 넣는다
        head, sep, tail = line.partition("\n")
        return f"{head} {' '.join(extras)}{sep}{tail}"


def configure_logging(level: str = "INFO") -> None:
    global _configured
    root = logging.getLogger()
    root.setLevel(level.upper())
    if _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(ExtraFieldsFormatter(_FORMAT))
    root.addHandler(handler)
    _configured = True
