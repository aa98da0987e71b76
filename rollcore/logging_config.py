# rollcore/logging_config.py
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
import gzip
import os
import shutil
from datetime import datetime

def _gzip_rotator(source: str, dest: str):
    """把旋轉出的檔案壓成 .gz"""
    # 例：dest=logs/latest.log.2025-08-13 → 轉成 logs/2025-08-13.log.gz
    date_str = Path(dest).name.split(".")[-1]
    out = Path(dest).with_name(f"{date_str}.log.gz")

    with open(source, "rb") as f_in, gzip.open(out, "wb") as f_out:
        shutil.copyfileobj(f_in, f_out)
    os.remove(source)

def setup_logging(log_dir: str = "logs", level: int = logging.INFO):
    Path(log_dir).mkdir(exist_ok=True)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(level)

    # 檔案：latest.log（午夜輪替，保留 30 份，歷史自動 .gz）
    fh = TimedRotatingFileHandler(
        str(Path(log_dir) / "latest.log"),
        when="midnight",
        backupCount=30,
        encoding="utf-8",
        utc=False,
    )
    fh.rotator = _gzip_rotator
    fh.setFormatter(formatter)
    root.addHandler(fh)

    # 終端
    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    root.addHandler(sh)

    root.info("==== Bot started at %s ====", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
