"""Shared test fixtures for vschema-ddl tests"""

import pytest

from vschema_ddl.applier import SchemaDDLApplier
from vschema_ddl.schema_store import MemorySchemaStore
from vschema_ddl.vschema import ColumnVindex, KeyspaceSchema, Table, Vindex

from common import TEST_KEYSPACE


@pytest.fixture
def store():
    return MemorySchemaStore()


@pytest.fixture
def applier(store):
    return SchemaDDLApplier(store)


@pytest.fixture
def unsharded_store():
    vschema = KeyspaceSchema(
        name=TEST_KEYSPACE,
        tables={
            'product': Table(),
            'customer_seq': Table(type='sequence'),
        },
    )
    return MemorySchemaStore([vschema])


@pytest.fixture
def sharded_store():
    vschema = KeyspaceSchema(
        name=TEST_KEYSPACE,
        sharded=True,
        vindexes={
            'hash_vdx': Vindex(type='hash'),
            'lookup_vdx': Vindex(
                type='lookup_unique',
                params={'table': 'lookup', 'from': 'name', 'to': 'keyspace_id'},
                owner='customer',
            ),
        },
        tables={
            'customer': Table(column_vindexes=[
                ColumnVindex(name='hash_vdx', columns=['customer_id']),
                ColumnVindex(name='lookup_vdx', columns=['name']),
            ]),
        },
    )
    return MemorySchemaStore([vschema])
