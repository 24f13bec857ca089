import os

import pytest
import yaml

from vschema_ddl.applier import apply_vschema_ddl
from vschema_ddl.ddl import AddColumnVindex, VindexSpec
from vschema_ddl.errors import PreconditionFailedError, SchemaNotFoundError, SchemaStoreError
from vschema_ddl.schema_store import FileSchemaStore, MemorySchemaStore
from vschema_ddl.vschema import ColumnVindex, KeyspaceSchema, Table, Vindex

from common import TEST_KEYSPACE


def make_vschema():
    return KeyspaceSchema(
        name=TEST_KEYSPACE,
        sharded=True,
        vindexes={'hash_vdx': Vindex(type='hash')},
        tables={'t1': Table(column_vindexes=[ColumnVindex(name='hash_vdx', columns=['id'])])},
    )


def test_memory_store_returns_copies():
    store = MemorySchemaStore()
    vschema = make_vschema()
    store.save_vschema(vschema)

    vschema.tables.clear()
    loaded = store.get_vschema(TEST_KEYSPACE)
    assert 't1' in loaded.tables

    loaded.vindexes.clear()
    assert 'hash_vdx' in store.get_vschema(TEST_KEYSPACE).vindexes


def test_memory_store_missing_and_delete():
    store = MemorySchemaStore([make_vschema()])
    assert store.get_keyspaces() == [TEST_KEYSPACE]

    with pytest.raises(SchemaNotFoundError):
        store.get_vschema('other')

    store.delete_vschema(TEST_KEYSPACE)
    with pytest.raises(SchemaNotFoundError):
        store.get_vschema(TEST_KEYSPACE)
    with pytest.raises(SchemaNotFoundError):
        store.delete_vschema(TEST_KEYSPACE)


def test_memory_store_read_only():
    store = MemorySchemaStore([make_vschema()], read_only=True)
    assert store.get_vschema(TEST_KEYSPACE) == make_vschema()
    with pytest.raises(PreconditionFailedError):
        store.save_vschema(make_vschema())


def test_file_store_save_and_load(tmp_path):
    store = FileSchemaStore(str(tmp_path / 'vschema'))
    assert store.get_keyspaces() == []

    store.save_vschema(make_vschema())

    file_name = tmp_path / 'vschema' / f'{TEST_KEYSPACE}.yaml'
    assert file_name.exists()
    assert not os.path.exists(str(file_name) + '.tmp')
    assert yaml.safe_load(file_name.read_text())['vindexes'] == {'hash_vdx': {'type': 'hash'}}

    assert store.get_vschema(TEST_KEYSPACE) == make_vschema()
    assert store.get_keyspaces() == [TEST_KEYSPACE]

    store.delete_vschema(TEST_KEYSPACE)
    assert store.get_keyspaces() == []


def test_file_store_missing_keyspace(tmp_path):
    store = FileSchemaStore(str(tmp_path))
    with pytest.raises(SchemaNotFoundError):
        store.get_vschema(TEST_KEYSPACE)


@pytest.mark.parametrize("content", [
    "tables: [\n",
    "- just\n- a list\n",
    "tables: [t1, t2]\n",
])
def test_file_store_malformed_file(tmp_path, content):
    (tmp_path / f'{TEST_KEYSPACE}.yaml').write_text(content)
    store = FileSchemaStore(str(tmp_path))
    with pytest.raises(SchemaStoreError):
        store.get_vschema(TEST_KEYSPACE)


def test_file_store_empty_file_is_empty_schema(tmp_path):
    (tmp_path / f'{TEST_KEYSPACE}.yaml').write_text('')
    store = FileSchemaStore(str(tmp_path))
    assert store.get_vschema(TEST_KEYSPACE) == KeyspaceSchema.empty(TEST_KEYSPACE)


def test_file_store_read_only(tmp_path):
    store = FileSchemaStore(str(tmp_path), read_only=True)
    with pytest.raises(PreconditionFailedError):
        store.save_vschema(make_vschema())
    assert not (tmp_path / f'{TEST_KEYSPACE}.yaml').exists()


@pytest.mark.parametrize("keyspace", ['', '../etc', '.hidden'])
def test_file_store_rejects_bad_keyspace_names(tmp_path, keyspace):
    store = FileSchemaStore(str(tmp_path))
    with pytest.raises(ValueError):
        store.get_vschema(keyspace)


@pytest.mark.parametrize("content", [
    "sharded: true\nvindexes:\n  region_vdx:\n    type: region_experimental\n    params:\n      region_bytes: 1\n",
    "sharded: true\nvindexes:\n  region_vdx:\n    type: region_experimental\n    owner:\n"
    "    params:\n      region_bytes: '1'\n",
])
def test_file_store_values_match_parsed_vindex_spec(tmp_path, content):
    (tmp_path / f'{TEST_KEYSPACE}.yaml').write_text(content)
    store = FileSchemaStore(str(tmp_path))

    loaded = store.get_vschema(TEST_KEYSPACE)
    assert loaded.vindexes['region_vdx'] == Vindex(
        type='region_experimental', params={'region_bytes': '1'}, owner='',
    )

    vschema = apply_vschema_ddl(TEST_KEYSPACE, store, AddColumnVindex(
        table='customer',
        vindex=VindexSpec(name='region_vdx', type='region_experimental', params=['region_bytes=1']),
        columns=['region', 'id'],
    ))
    assert vschema.tables['customer'].column_vindexes == [
        ColumnVindex(name='region_vdx', columns=['region', 'id']),
    ]
