import json
import logging
import os
import tempfile
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from core.db import create_session_factory
from core.models import StateDocument
from core.schemas import AccessState

logger = logging.getLogger(__name__)

DOCUMENTS = ("subscriptions", "users", "logs")


class StorageError(Exception):
    pass


class Storage:
    """Снапшот-хранилище: загрузка при старте, полная перезапись после каждой мутации."""

    def load_all(self) -> AccessState:
        raise NotImplementedError

    def save_all(self, state: AccessState) -> None:
        raise NotImplementedError


def _documents(state):
    dumped = state.model_dump(mode="json")
    return {name: dumped[name] for name in DOCUMENTS}


class JsonFileStorage(Storage):
    FILES = {
        "subscriptions": "subscriptions.json",
        "users": "users.json",
        "logs": "logs.json",
    }

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)

    def load_all(self):
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data dir {self.data_dir}: {e}") from e

        docs = {}
        missing = []
        for name, filename in self.FILES.items():
            path = self.data_dir / filename
            try:
                docs[name] = json.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                missing.append(filename)
            except (OSError, ValueError) as e:
                raise StorageError(f"Cannot read {path}: {e}") from e

        try:
            state = AccessState.model_validate(docs)
        except ValueError as e:
            raise StorageError(f"Invalid data in {self.data_dir}: {e}") from e
        if missing:
            logger.info(f"📁 Создаю файлы данных по умолчанию: {', '.join(missing)}")
            self.save_all(state)
        return state

    def save_all(self, state):
        staged = []
        try:
            for name, doc in _documents(state).items():
                path = self.data_dir / self.FILES[name]
                staged.append((self._write_temp(path, doc), path))
            for tmp_path, path in staged:
                os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.data_dir}: {e}") from e
        finally:
            for tmp_path, _ in staged:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)

    def _write_temp(self, path, doc):
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            os.unlink(tmp_path)
            raise StorageError(f"Cannot write {path}: {e}") from e
        return tmp_path


class SqlStorage(Storage):
    """Все три документа переписываются в одной транзакции."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    @classmethod
    def from_url(cls, db_url):
        url = make_url(db_url)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        try:
            return cls(create_session_factory(db_url))
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot open database: {e}") from e

    def load_all(self):
        try:
            with self.session_factory() as session:
                rows = session.query(StateDocument).all()
                docs = {row.name: json.loads(row.payload) for row in rows}
            state = AccessState.model_validate(docs)
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot load state: {e}") from e
        except ValueError as e:
            raise StorageError(f"Invalid state document: {e}") from e

        if any(name not in docs for name in DOCUMENTS):
            logger.info("📁 Инициализирую документы состояния в БД")
            self.save_all(state)
        return state

    def save_all(self, state):
        try:
            with self.session_factory() as session:
                with session.begin():
                    for name, doc in _documents(state).items():
                        session.merge(StateDocument(name=name, payload=json.dumps(doc, ensure_ascii=False)))
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot save state: {e}") from e
