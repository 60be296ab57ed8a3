import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional
from uuid import uuid4

from sqlalchemy import create_engine, delete, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from chat_core.config.settings import settings
from chat_core.domain.conversation import Chat, ConversationStore, Message
from chat_core.domain.exceptions import InvalidInputError, PersistenceError
from chat_core.domain.models import VALID_ROLES
from chat_core.infrastructure.logging.logger import logger
from chat_core.infrastructure.storage.schema import Base, ChatRow, MessageRow


POOL_SIZE = 5


def _now_ms() -> int:
    return int(time.time() * 1000)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite 默认关闭外键约束，级联删除依赖它
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class SqlConversationStore(ConversationStore):
    """基于 SQLite 的会话存储。

    首次调用任意操作时执行 initialize()：创建数据库文件与两张表，
    每个进程内只执行一次；连接池大小固定为 5，写操作由 SQLite 自身串行化。
    """

    def __init__(self, db_path: str | Path | None = None):
        self._db_path = Path(db_path or settings.database_path).resolve()
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._init_lock = threading.Lock()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def initialize(self) -> None:
        if self._session_factory is not None:
            return
        with self._init_lock:
            if self._session_factory is not None:
                return
            try:
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
                engine = create_engine(
                    f"sqlite:///{self._db_path}",
                    poolclass=QueuePool,
                    pool_size=POOL_SIZE,
                    max_overflow=0,
                    connect_args={"check_same_thread": False},
                )
                event.listen(engine, "connect", _enable_foreign_keys)
                Base.metadata.create_all(engine)
            except (OSError, SQLAlchemyError) as e:
                logger.error("Database setup failed", extra={"extra": {"db_path": str(self._db_path)}})
                raise PersistenceError(str(e), code="STORE_INIT_ERROR")
            self._engine = engine
            self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
            logger.info("Database ready", extra={"extra": {"db_path": str(self._db_path)}})

    def close(self) -> None:
        with self._init_lock:
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @contextmanager
    def _session(self, error_code: str) -> Iterator[Session]:
        self.initialize()
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Store operation failed", extra={"extra": {"code": error_code, "error": str(e)}})
            raise PersistenceError(str(e), code=error_code)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ---- chats ----

    def create_chat(self, title: str) -> Chat:
        with self._session("STORE_WRITE_ERROR") as session:
            row = ChatRow(uuid=str(uuid4()), title=title, created_at=_now_ms())
            session.add(row)
            session.flush()
            return self._to_chat(row)

    def get_chat(self, chat_id: int) -> Chat:
        with self._session("STORE_READ_ERROR") as session:
            row = session.get(ChatRow, chat_id)
            if row is None:
                raise PersistenceError(f"Chat {chat_id} not found", code="CHAT_NOT_FOUND", chat_id=chat_id)
            return self._to_chat(row)

    def list_chats(self) -> List[Chat]:
        with self._session("STORE_READ_ERROR") as session:
            rows = session.scalars(
                select(ChatRow).order_by(ChatRow.created_at.desc(), ChatRow.id.desc())
            ).all()
            return [self._to_chat(r) for r in rows]

    def delete_chat(self, chat_id: int) -> None:
        """删除会话，消息由外键级联删除。"""
        with self._session("STORE_DELETE_ERROR") as session:
            session.execute(delete(ChatRow).where(ChatRow.id == chat_id))

    # ---- messages ----

    def clear_messages(self, chat_id: int) -> None:
        """清空会话下的全部消息，会话本身保留。"""
        with self._session("STORE_DELETE_ERROR") as session:
            session.execute(delete(MessageRow).where(MessageRow.chat_id == chat_id))

    def create_message(
        self,
        chat_id: int,
        sender_id: Optional[str],
        provider: str,
        role: str,
        content: str,
    ) -> Message:
        if role not in VALID_ROLES:
            raise InvalidInputError(f"Unsupported message role: {role!r}")
        if not content or not content.strip():
            raise InvalidInputError("Message content cannot be empty.")
        with self._session("STORE_WRITE_ERROR") as session:
            row = MessageRow(
                uuid=str(uuid4()),
                chat_id=chat_id,
                sender_id=sender_id,
                provider=provider,
                role=role,
                content=content,
                created_at=_now_ms(),
            )
            session.add(row)
            session.flush()
            return self._to_message(row)

    def list_messages(self, chat_id: int) -> List[Message]:
        with self._session("STORE_READ_ERROR") as session:
            rows = session.scalars(
                select(MessageRow)
                .where(MessageRow.chat_id == chat_id)
                .order_by(MessageRow.created_at.asc(), MessageRow.id.asc())
            ).all()
            return [self._to_message(r) for r in rows]

    @staticmethod
    def _to_chat(row: ChatRow) -> Chat:
        return Chat(id=row.id, uuid=row.uuid, title=row.title, created_at=row.created_at)

    @staticmethod
    def _to_message(row: MessageRow) -> Message:
        return Message(
            id=row.id,
            uuid=row.uuid,
            chat_id=row.chat_id,
            sender_id=row.sender_id,
            provider=row.provider,
            role=row.role,
            content=row.content,
            created_at=row.created_at,
        )
