"""채널 레지스트리

추적 대상이 한 명 이상 속한 채널 ID 집합을 JSON 배열 파일로 영속화합니다.
다른 작업(멘션 집계 등)이 스캔할 채널의 유일한 기준입니다.

쓰기는 일일 정비 작업만 수행합니다. 저장은 같은 디렉토리의 임시 파일에 쓴 뒤
os.replace로 교체하므로 중간에 프로세스가 죽어도 기존 파일이 깨지지 않습니다.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from filelock import FileLock

logger = logging.getLogger(__name__)

REGISTRY_FILENAME = "channels.json"


class ChannelRegistry:
    """채널 ID 집합 저장소"""

    def __init__(self, data_dir: Path | str, filename: str = REGISTRY_FILENAME):
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / filename
        self._lock_path = self.data_dir / f"{filename}.lock"
        self._channels: set[str] = set()

    @property
    def channels(self) -> set[str]:
        """메모리상 스냅샷 (복사본)

        마지막 저장이 실패했더라도 가장 최근에 save()로 넘긴 값을 반환합니다.
        """
        return set(self._channels)

    def load(self) -> set[str]:
        """저장된 채널 집합 로드

        파일이 없거나 읽기/파싱에 실패하면 빈 집합을 반환합니다 (예외 없음).
        로드 결과는 메모리상 스냅샷이 됩니다.
        """
        if not self.path.exists():
            logger.info(f"채널 레지스트리 파일 없음: {self.path}")
            self._channels = set()
            return set()

        try:
            with FileLock(str(self._lock_path), timeout=5):
                data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, list):
                raise ValueError(f"JSON 배열이 아님: {type(data).__name__}")
            channels = {str(c) for c in data if c}
        except Exception as e:
            logger.error(f"채널 레지스트리 로드 실패: {e}")
            self._channels = set()
            return set()

        self._channels = channels
        logger.info(f"채널 레지스트리 로드: {len(channels)}개 채널")
        return set(channels)

    def save(self, channels: set[str]) -> bool:
        """채널 집합 저장 (기존 내용 덮어쓰기)

        Returns:
            성공 여부. 실패해도 메모리상 스냅샷은 갱신됩니다.
        """
        self._channels = set(channels)
        payload = json.dumps(sorted(self._channels), ensure_ascii=False, indent=2)

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with FileLock(str(self._lock_path), timeout=5):
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.data_dir, prefix=f".{self.path.name}.", suffix=".tmp"
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        f.write(payload)
                        f.flush()
                        os.fsync(f.fileno())
                    os.replace(tmp_name, self.path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
        except Exception as e:
            logger.error(f"채널 레지스트리 저장 실패: {e}")
            return False

        logger.info(f"채널 레지스트리 저장: {len(self._channels)}개 채널")
        return True
