"""
morexport/tunnel/executor.py
Runs one parameterized query against MOR through an SSH tunnel.

One call = one SSH session, one database connection, one cursor. All three
are closed on every exit path, success or failure, before execute() returns.
No retries: any failure aborts the run.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Sequence, TypeVar

import pymysql

from morexport.config import ConnectionProfile
from morexport.errors import QueryError, TunnelError
from morexport.tunnel.ssh_tunnel import Dialer, SSHTunnel

logger = logging.getLogger(__name__)

Row = TypeVar('Row')

# cursor -> typed rows
Decoder = Callable[[Any], List[Row]]


def row_decoder(decode_one: Callable[[Sequence[Any]], Row]) -> Decoder:
    """Decoder applying `decode_one` to every fetched database tuple."""
    def decode(cursor) -> List[Row]:
        return [decode_one(record) for record in cursor.fetchall()]
    return decode


def connect_database(profile: ConnectionProfile, dialer: Dialer) -> pymysql.connections.Connection:
    """Open a MySQL connection whose transport is a stream from `dialer`."""
    sock = dialer.dial(profile.db_address)
    conn = pymysql.connect(
        host          = profile.db_host,
        port          = profile.db_port,
        user          = profile.db_user,
        password      = profile.db_password,
        database      = profile.db_name,
        charset       = 'utf8mb4',
        defer_connect = True,
    )
    try:
        conn.connect(sock)
    except pymysql.MySQLError as e:
        raise TunnelError(
            f"Database connection to {profile.db_host}:{profile.db_port}/{profile.db_name} "
            f"through SSH failed: {e}"
        ) from e
    logger.debug(f"Connected to {profile.db_name} on {profile.db_host}:{profile.db_port}")
    return conn


class TunneledQueryExecutor:
    """
    execute(sql, params, decoder) -> rows

    open_tunnel and connect are injectable so the executor runs against
    fakes in tests; defaults are the paramiko tunnel and PyMySQL.
    """

    def __init__(
        self,
        profile:     ConnectionProfile,
        open_tunnel: Callable[[ConnectionProfile], Any] = SSHTunnel.open,
        connect:     Callable[[ConnectionProfile, Dialer], Any] = connect_database,
    ):
        self.profile      = profile
        self._open_tunnel = open_tunnel
        self._connect     = connect

    def execute(self, sql: str, params: Sequence[Any], decoder: Decoder) -> List[Row]:
        logger.debug(f"SQL:\n{sql}\nparams: {list(params)}")

        with _released(self._open_tunnel(self.profile), 'SSH tunnel') as tunnel:
            with _released(self._connect(self.profile, tunnel), 'database connection') as conn:
                with _released(conn.cursor(), 'cursor') as cursor:
                    try:
                        cursor.execute(sql, tuple(params))
                    except pymysql.MySQLError as e:
                        raise QueryError(f"Query failed: {e}") from e
                    try:
                        rows = decoder(cursor)
                    except (pymysql.MySQLError, ValueError, TypeError, IndexError) as e:
                        raise QueryError(f"Cannot decode query result: {e}") from e

        logger.info(f"Query returned {len(rows)} rows")
        return rows


@contextmanager
def _released(resource, name: str) -> Iterator[Any]:
    """Close `resource` on exit; a failing close is logged, never masks the original error."""
    try:
        yield resource
    finally:
        try:
            resource.close()
        except Exception as e:
            logger.warning(f"Closing {name} failed: {e}")
