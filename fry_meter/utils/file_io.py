import json
from pathlib import Path
from typing import Any, List, Optional

import cv2
import numpy as np

from fry_meter.utils.image_utils import bgr_to_rgba

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff", ".webp"}


class FileIO:
    def load_image(self, filepath: Path) -> Optional[np.ndarray]:
        """이미지 파일을 RGBA uint8 배열로 로드. 실패 시 None."""
        filepath = Path(filepath)
        if not filepath.exists():
            return None
        try:
            # np.fromfile + imdecode로 비ASCII 경로에서도 로딩 안정화
            data = np.fromfile(str(filepath), dtype=np.uint8)
            if data.size == 0:
                return None
            img = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
        except (OSError, cv2.error):
            # 디렉터리, 권한 없음, 읽기 실패
            return None
        if img is None:
            return None
        if img.dtype != np.uint8:
            # 16-bit PNG/TIFF → 8-bit
            img = (img.astype(np.float64) / 257.0).round().clip(0, 255).astype(np.uint8)
        return bgr_to_rgba(img)


def list_images(folder: Path, recursive: bool = False) -> List[Path]:
    pattern = "**/*" if recursive else "*"
    return sorted(p for p in Path(folder).glob(pattern) if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS)


def read_json(filepath: Path) -> dict:
    filepath = Path(filepath)
    if filepath.exists():
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def write_json(data: Any, filepath: Path):
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
