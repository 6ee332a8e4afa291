"""Engine configuration is derived from the URL without connecting."""


def test_sqlite_engine_kwargs_disable_thread_check():
    from lifetasks.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./lifetasks.db")

    assert kwargs["connect_args"] == {"check_same_thread": False}
    assert kwargs["pool_pre_ping"] is True
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs


def test_postgres_engine_kwargs_read_pool_settings(monkeypatch):
    from lifetasks.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "3")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "7")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "12")

    kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/lifetasks")

    assert "connect_args" not in kwargs
    assert kwargs["pool_size"] == 3
    assert kwargs["max_overflow"] == 7
    assert kwargs["pool_timeout"] == 12


def test_echo_follows_debug_flag(monkeypatch):
    from lifetasks.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite://")["echo"] is True
    monkeypatch.setenv("DEBUG", "false")
    assert db.get_engine_kwargs("sqlite://")["echo"] is False


def test_sqlite_url_detection():
    from lifetasks.database import database as db

    assert db._is_sqlite_url("sqlite:///./lifetasks.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False
    assert db._is_sqlite_url("") is False


def test_init_db_creates_every_table(monkeypatch, tmp_path):
    from sqlalchemy import inspect
    from lifetasks.database import database as db

    engine = db.build_engine(f"sqlite:///{tmp_path / 'init.db'}")
    monkeypatch.setattr(db, "engine", engine)

    db.init_db()

    assert {"users", "tasks", "backlog_tasks", "recurring_tasks", "classes", "class_modules"} <= set(
        inspect(engine).get_table_names()
    )
