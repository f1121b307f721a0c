from __future__ import annotations

from dataclasses import dataclass

from mysql.connector import pooling


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 10
    connection_timeout: int = 10

    @classmethod
    def from_mapping(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
            pool_size=int(db_config.get("pool_size", 10)),
            connection_timeout=int(db_config.get("connection_timeout", 10)),
        )


class DatabaseConnection:
    """Connection factory backed by a mysql-connector pool.

    Built once by the container and passed to every repository; connections
    are borrowed per operation and returned to the pool on close().
    """

    def __init__(self, config: DBConfig, *, pool_name: str = "kindergarten"):
        self._config = config
        self._pool_name = pool_name
        self._pool = None

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        if self._pool is None:
            self._pool = pooling.MySQLConnectionPool(
                pool_name=self._pool_name,
                pool_size=int(self._config.pool_size),
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                connection_timeout=int(self._config.connection_timeout),
            )
        return self._pool

    def connect(self):
        return self._get_pool().get_connection()
