"""Runtime support imported by generated modules.

Submodules
----------
``types``      column types: decoding and value synthesis
``sqlite``     statement handles and lazy rows for the embedded backend
``client``     the client protocol and prepared-statement handle
``postgres``   psycopg adapter and the test connection helper
``results``    cardinality contracts
``cache``      prepared-statement cache
``arbitrary``  deterministic test-value generator
``testing``    entry-point registry helpers

``postgres`` imports psycopg and is therefore not imported here.
"""
from sqlfn.runtime.arbitrary import RAW_TEST_DATA, Unstructured
from sqlfn.runtime.cache import Cache
from sqlfn.runtime.client import GenericClient, PreparedStatement
from sqlfn.runtime.results import expect_one, expect_opt
from sqlfn.runtime.testing import TestOutcome, collect_entry_points, run_entry_points

__all__ = [
    "Cache",
    "GenericClient",
    "PreparedStatement",
    "RAW_TEST_DATA",
    "TestOutcome",
    "Unstructured",
    "collect_entry_points",
    "expect_one",
    "expect_opt",
    "run_entry_points",
]
