import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.config import get_data_dir
from ..core.logger import get_logger
from ..models.schema import ALL_ENTITY_KINDS, EntityKind, EntityRecord
from .memory import InMemoryGateway

logger = get_logger(__name__)


class JsonFileGateway(InMemoryGateway):
    """
    Gateway over an exported collection file, `<data_dir>/<collection>.json`.

    The file holds either a list of documents or a mapping of store key to
    document. It is read lazily on first access; a missing file is an empty
    collection, a corrupt file fails every query on this gateway.
    """

    def __init__(self, kind: EntityKind, path: Path) -> None:
        super().__init__(kind)
        self.path = path
        self._loaded = False
        self._load_lock = threading.Lock()

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._load_lock:
            if self._loaded:
                return
            if not self.path.exists():
                logger.warning(f"No data file for {self.kind.collection}: {self.path}")
                self._loaded = True
                return
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                for key, doc in data.items():
                    if isinstance(doc, dict):
                        self.add(doc, key=str(key))
            elif isinstance(data, list):
                for doc in data:
                    if isinstance(doc, dict):
                        self.add(doc)
            else:
                raise ValueError(f"Unsupported collection file layout in {self.path}")
            self._loaded = True
            logger.info(f"Loaded {len(self)} {self.kind.collection} records from {self.path}")

    def get_by_reference_id(self, reference_id: str) -> Optional[EntityRecord]:
        self._ensure_loaded()
        return super().get_by_reference_id(reference_id)

    def query_by_field(self, field: str, value: Any, limit: Optional[int] = None) -> List[EntityRecord]:
        self._ensure_loaded()
        return super().query_by_field(field, value, limit)

    def scan_all(self, limit: Optional[int] = None) -> List[EntityRecord]:
        self._ensure_loaded()
        return super().scan_all(limit)


def build_json_gateways(data_dir: Optional[Path] = None) -> Dict[EntityKind, JsonFileGateway]:
    """
    One JSON-file gateway per entity kind, keyed in collection enumeration order.
    """
    base = data_dir or get_data_dir()
    return {kind: JsonFileGateway(kind, base / f"{kind.collection}.json") for kind in ALL_ENTITY_KINDS}
