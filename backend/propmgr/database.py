from pymysql.constants import CLIENT
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from propmgr.config import Settings, get_settings


def get_server_url(settings: Settings) -> URL:
    """Build the server-scope MySQL URL (no database selected)."""
    if settings.DATABASE_URL:
        url = make_url(settings.DATABASE_URL)
        if url.get_backend_name() != "mysql":
            raise ValueError(f"Unsupported DATABASE_URL format: {settings.DATABASE_URL}")
        if url.get_driver_name() != "pymysql":
            url = url.set(drivername="mysql+pymysql")
        return url

    return URL.create(
        "mysql+pymysql",
        username=settings.DB_USER,
        password=settings.DB_PASSWORD or None,
        host=settings.DB_HOST,
        port=settings.DB_PORT,
    )


def create_server_engine(settings: Settings = None) -> Engine:
    """
    Create the engine used by the bootstrap.

    The connection allows several statements per query, like the MySQL
    client does when it runs a script.
    """
    settings = settings or get_settings()
    return create_engine(
        get_server_url(settings),
        connect_args={
            "client_flag": CLIENT.MULTI_STATEMENTS,
            "connect_timeout": settings.DB_CONNECT_TIMEOUT,
            "charset": "utf8mb4",
        },
        isolation_level="AUTOCOMMIT",
        echo=settings.DEBUG  # Log SQL queries in debug mode
    )
