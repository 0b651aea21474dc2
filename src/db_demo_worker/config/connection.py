"""Connection string parsing for the relational backends.

Two forms are accepted:

* URLs, e.g. ``postgresql://user:secret@db:5432/app?sslmode=require``
* driver-style keyword strings, e.g.
  ``Host=db;Port=5432;Username=user;Password=secret;Database=app``

PostgreSQL URLs go to asyncpg untouched as a DSN. Everything else is
parsed into ``ConnectionParams`` and translated into driver keyword
arguments. Options a driver cannot honour are rejected rather than
dropped.
"""

import re
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, unquote, urlsplit


_KEY_ALIASES = {
    "host": "host",
    "server": "host",
    "datasource": "host",
    "address": "host",
    "port": "port",
    "username": "user",
    "user": "user",
    "userid": "user",
    "uid": "user",
    "password": "password",
    "pwd": "password",
    "database": "database",
    "initialcatalog": "database",
    "db": "database",
}

_PG_SSL_MODES = {
    "disable": "disable",
    "allow": "allow",
    "prefer": "prefer",
    "require": "require",
    "verifyca": "verify-ca",
    "verifyfull": "verify-full",
}

_TIMEOUT_KEYS = {"timeout", "connecttimeout", "connectiontimeout"}

_URL_PASSWORD = re.compile(r"(?P<prefix>://[^:/@]+:)(?P<secret>[^/?#]*)(?P<suffix>@)")
_KV_PASSWORD = re.compile(r"(?P<prefix>(?:^|;)\s*(?:password|pwd)\s*=)(?P<secret>[^;]*)", re.IGNORECASE)


def _normalize_key(key: str) -> str:
    """``Connect Timeout``, ``connect_timeout`` and ``ssl-mode`` style keys compare equal."""
    return re.sub(r"[\s_-]", "", key.lower())


def _parse_port(value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"Invalid port in connection string: {value!r}") from e


def _parse_seconds(key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise ValueError(f"Invalid {key} in connection string: {value!r}") from e


@dataclass
class ConnectionParams:
    """Normalised connection parameters."""
    host: str = "localhost"
    port: Optional[int] = None
    user: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None
    extra_hosts: List[Tuple[str, Optional[int]]] = field(default_factory=list)
    options: Dict[str, str] = field(default_factory=dict)

    def for_asyncpg(self) -> Dict[str, Any]:
        """
        Keyword arguments for ``asyncpg.connect``.

        Raises:
            ValueError: If an option has no asyncpg equivalent
        """
        port = self.port or 5432
        kwargs: Dict[str, Any] = {
            "host": self.host,
            "port": port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }
        if self.extra_hosts:
            kwargs["host"] = [self.host] + [host for host, _ in self.extra_hosts]
            kwargs["port"] = [port] + [extra_port or port for _, extra_port in self.extra_hosts]

        for key, value in self.options.items():
            if key == "sslmode":
                mode = _PG_SSL_MODES.get(_normalize_key(value))
                if mode is None:
                    raise ValueError(f"Unsupported SSL mode for PostgreSQL: {value!r}")
                kwargs["ssl"] = mode
            elif key in _TIMEOUT_KEYS:
                kwargs["timeout"] = _parse_seconds(key, value)
            elif key == "commandtimeout":
                kwargs["command_timeout"] = _parse_seconds(key, value)
            elif key == "applicationname":
                kwargs.setdefault("server_settings", {})["application_name"] = value
            else:
                raise ValueError(f"Unsupported connection string option for PostgreSQL: {key!r}")
        return kwargs

    def for_aiomysql(self) -> Dict[str, Any]:
        """
        Keyword arguments for ``aiomysql.connect``.

        Raises:
            ValueError: If more than one host is given or an option has no
                aiomysql equivalent
        """
        if self.extra_hosts:
            raise ValueError("MySQL connection strings accept a single host")

        kwargs: Dict[str, Any] = {
            "host": self.host,
            "port": self.port or 3306,
            "user": self.user,
            "password": self.password or "",
            "autocommit": True,
        }
        if self.database:
            kwargs["db"] = self.database

        for key, value in self.options.items():
            if key == "sslmode":
                context = _mysql_ssl_context(value)
                if context is not None:
                    kwargs["ssl"] = context
            elif key in _TIMEOUT_KEYS:
                kwargs["connect_timeout"] = _parse_seconds(key, value)
            elif key in ("charset", "characterset"):
                kwargs["charset"] = value
            else:
                raise ValueError(f"Unsupported connection string option for MySQL: {key!r}")
        return kwargs


def _mysql_ssl_context(mode: str) -> Optional[ssl.SSLContext]:
    """Map a MySQL ``SslMode`` to the context aiomysql expects, or None for plain TCP."""
    mode = _normalize_key(mode)
    if mode in ("none", "disabled"):
        return None
    if mode not in ("preferred", "required", "verifyca", "verifyfull", "verifyidentity"):
        raise ValueError(f"Unsupported SSL mode for MySQL: {mode!r}")

    context = ssl.create_default_context()
    if mode in ("preferred", "required", "verifyca"):
        context.check_hostname = False
    if mode in ("preferred", "required"):
        context.verify_mode = ssl.CERT_NONE
    return context


def parse_connection_string(raw: str) -> ConnectionParams:
    """
    Parse a URL or keyword connection string.

    Raises:
        ValueError: If the string is blank or the port is not a number
    """
    if raw is None or not raw.strip():
        raise ValueError("Connection string is empty")

    raw = raw.strip()
    if "://" in raw:
        return _parse_url(raw)
    return _parse_keywords(raw)


def asyncpg_connect_kwargs(raw: str) -> Dict[str, Any]:
    """
    Keyword arguments for ``asyncpg.connect``.

    URLs are handed over as ``dsn`` so asyncpg applies every libpq
    parameter they carry.
    """
    if raw is not None and "://" in raw:
        return {"dsn": raw.strip()}
    return parse_connection_string(raw).for_asyncpg()


def aiomysql_connect_kwargs(raw: str) -> Dict[str, Any]:
    """Keyword arguments for ``aiomysql.connect``."""
    return parse_connection_string(raw).for_aiomysql()


def _parse_url(raw: str) -> ConnectionParams:
    parts = urlsplit(raw)
    try:
        port = parts.port
    except ValueError as e:
        raise ValueError(f"Invalid port in connection string: {e}") from e

    return ConnectionParams(
        host=parts.hostname or "localhost",
        port=port,
        user=unquote(parts.username) if parts.username else None,
        password=unquote(parts.password) if parts.password else None,
        database=unquote(parts.path.lstrip("/")) or None,
        options={_normalize_key(k): v for k, v in parse_qsl(parts.query)},
    )


def _split_host_port(entry: str) -> Tuple[str, Optional[int]]:
    if entry.startswith("["):
        host, _, rest = entry[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else ""
    elif entry.count(":") == 1:
        host, _, port = entry.partition(":")
    else:
        # Bare IPv6 address, no port
        host, port = entry, ""
    return host, _parse_port(port) if port else None


def _parse_hosts(value: str) -> List[Tuple[str, Optional[int]]]:
    entries = [entry.strip() for entry in value.split(",")]
    # Server=db,3306 carries the port after a comma
    if len(entries) == 2 and entries[1].isdigit():
        return [(entries[0], int(entries[1]))]
    return [_split_host_port(entry) for entry in entries if entry]


def _parse_keywords(raw: str) -> ConnectionParams:
    params = ConnectionParams()
    inline_port = None

    for segment in raw.split(";"):
        if not segment.strip():
            continue
        if "=" not in segment:
            raise ValueError(f"Invalid connection string segment: {segment.strip()!r}")

        key, value = segment.split("=", 1)
        key = _normalize_key(key)
        value = value.strip()
        target = _KEY_ALIASES.get(key)

        if target == "port":
            params.port = _parse_port(value)
        elif target == "host":
            hosts = _parse_hosts(value)
            if hosts:
                (params.host, inline_port), params.extra_hosts = hosts[0], hosts[1:]
        elif target:
            setattr(params, target, value)
        else:
            params.options[key] = value

    if inline_port is not None:
        params.port = inline_port
    return params


def mask_connection_string(raw: Optional[str]) -> str:
    """Return the connection string with its password hidden."""
    if not raw:
        return ""
    masked = _URL_PASSWORD.sub(r"\g<prefix>****\g<suffix>", raw)
    return _KV_PASSWORD.sub(r"\g<prefix>****", masked)
