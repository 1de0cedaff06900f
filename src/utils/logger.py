from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(log_dir: Path, name: str, level: int = logging.INFO) -> logging.Logger:
    """
    콘솔 + 파일로 동시에 출력하는 logger를 반환한다.

    Args:
        log_dir (Path): 로그 파일 저장 디렉토리.
        name (str): logger 이름이자 로그 파일명 접두어.
        level (int): 로그 레벨.

    Returns:
        logging.Logger: 설정이 끝난 logger.

    Note:
        - 로그 파일명은 {name}_{YYYYmmdd_HHMMSS}.log.
        - 같은 이름으로 다시 호출하면 handler를 중복으로 붙이지 않는다.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    file_handler = logging.FileHandler(log_dir / f"{name}_{stamp}.log", encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger
