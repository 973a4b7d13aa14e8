"""Configuration for the compiler and for generated network-backend tests.

:class:`GeneratorConfig` is passed to the compilation pipeline.
:class:`PostgresTestSettings` is read from the environment by generated test
entry points that need a PostgreSQL server::

    export SQLFN_TEST_POSTGRES_DSN="host=localhost port=5433 user=postgres"
    # or, mirroring a local docker-compose setup:
    export SQLFN_TEST_POSTGRES_PORT=5433
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from sqlfn.errors import ConfigError

DSN_ENV = "SQLFN_TEST_POSTGRES_DSN"
PORT_ENV = "SQLFN_TEST_POSTGRES_PORT"
HOST_ENV = "SQLFN_TEST_POSTGRES_HOST"
USER_ENV = "SQLFN_TEST_POSTGRES_USER"


@dataclass
class GeneratorConfig:
    """Options applied to one compilation run.

    Attributes:
        strict_placeholders: Fail compilation when a ``:name`` placeholder in a
            ``named`` query matches no declared parameter (``::`` casts are
            exempt).  Off by default: unmatched names pass through verbatim.
        emit_tests: Generate test setup routines, entry points and the
            ``AUTO_TESTS`` registry.
        module_docstring: Extra text for the generated module docstring.
        runtime_package: Import path of the runtime support package.
    """

    strict_placeholders: bool = False
    emit_tests: bool = True
    module_docstring: str = ""
    runtime_package: str = "sqlfn.runtime"


@dataclass(frozen=True)
class PostgresTestSettings:
    """Connection parameters for generated PostgreSQL tests.

    Attributes:
        conninfo: libpq connection string.
    """

    conninfo: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PostgresTestSettings:
        """Read settings from ``environ`` (defaults to ``os.environ``).

        ``SQLFN_TEST_POSTGRES_DSN`` wins when set.  Otherwise
        ``SQLFN_TEST_POSTGRES_PORT`` is required and combined with
        ``SQLFN_TEST_POSTGRES_HOST`` (default ``localhost``) and
        ``SQLFN_TEST_POSTGRES_USER`` (default ``postgres``).

        Raises:
            ConfigError: If neither the DSN nor the port is set.
        """
        env = os.environ if environ is None else environ
        dsn = env.get(DSN_ENV)
        if dsn:
            return cls(conninfo=dsn)

        port = env.get(PORT_ENV)
        if not port:
            raise ConfigError(f"Set {DSN_ENV} or {PORT_ENV} to run PostgreSQL tests.")
        host = env.get(HOST_ENV, "localhost")
        user = env.get(USER_ENV, "postgres")
        return cls(conninfo=f"user={user} host={host} port={port}")
