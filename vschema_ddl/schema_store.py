import copy
import os
from logging import getLogger

import yaml

from .errors import PreconditionFailedError, SchemaNotFoundError, SchemaStoreError
from .vschema import KeyspaceSchema


logger = getLogger(__name__)


class SchemaStore:
    """Read/write access to the persisted VSchema of each keyspace.

    get_vschema() raises SchemaNotFoundError when a keyspace has no schema yet
    and SchemaStoreError when the store itself cannot be read.
    """

    read_only = False

    def get_vschema(self, keyspace_name) -> KeyspaceSchema:
        raise NotImplementedError

    def save_vschema(self, vschema: KeyspaceSchema):
        raise NotImplementedError

    def delete_vschema(self, keyspace_name):
        raise NotImplementedError

    def get_keyspaces(self) -> list[str]:
        raise NotImplementedError

    def check_writable(self, keyspace_name):
        if self.read_only:
            raise PreconditionFailedError(
                f'cannot save VSchema of keyspace {keyspace_name}: the schema store is read-only',
                keyspace=keyspace_name,
            )


class MemorySchemaStore(SchemaStore):
    def __init__(self, vschemas=None, read_only=False):
        self.read_only = read_only
        self.vschemas: dict[str, KeyspaceSchema] = {}
        for vschema in vschemas or []:
            self.vschemas[vschema.name] = copy.deepcopy(vschema)

    def get_vschema(self, keyspace_name):
        vschema = self.vschemas.get(keyspace_name)
        if vschema is None:
            raise SchemaNotFoundError(f'no VSchema for keyspace {keyspace_name}')
        return copy.deepcopy(vschema)

    def save_vschema(self, vschema):
        self.check_writable(vschema.name)
        self.vschemas[vschema.name] = copy.deepcopy(vschema)

    def delete_vschema(self, keyspace_name):
        self.check_writable(keyspace_name)
        if self.vschemas.pop(keyspace_name, None) is None:
            raise SchemaNotFoundError(f'no VSchema for keyspace {keyspace_name}')

    def get_keyspaces(self):
        return sorted(self.vschemas.keys())


class FileSchemaStore(SchemaStore):
    """Keeps one YAML document per keyspace in data_dir."""

    FILE_EXTENSION = '.yaml'

    def __init__(self, data_dir, read_only=False):
        self.data_dir = data_dir
        self.read_only = read_only

    def get_file_name(self, keyspace_name):
        if not keyspace_name or os.sep in keyspace_name or keyspace_name.startswith('.'):
            raise ValueError(f'invalid keyspace name {keyspace_name!r}')
        return os.path.join(self.data_dir, keyspace_name + self.FILE_EXTENSION)

    def get_vschema(self, keyspace_name):
        file_name = self.get_file_name(keyspace_name)
        if not os.path.exists(file_name):
            raise SchemaNotFoundError(f'no VSchema for keyspace {keyspace_name} in {self.data_dir}')
        try:
            with open(file_name, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise SchemaStoreError(f'failed to read {file_name}: {e}') from e
        if data is not None and not isinstance(data, dict):
            raise SchemaStoreError(f'{file_name} should contain a mapping and not {type(data).__name__}')
        try:
            return KeyspaceSchema.from_dict(keyspace_name, data)
        except (AttributeError, TypeError) as e:
            raise SchemaStoreError(f'malformed VSchema in {file_name}: {e}') from e

    def save_vschema(self, vschema):
        self.check_writable(vschema.name)
        file_name = self.get_file_name(vschema.name)
        os.makedirs(self.data_dir, exist_ok=True)
        data = yaml.safe_dump(vschema.to_dict(), sort_keys=True)
        with open(file_name + '.tmp', 'w') as f:
            f.write(data)
        os.rename(file_name + '.tmp', file_name)
        logger.debug(f'saved VSchema of keyspace {vschema.name} to {file_name}')

    def delete_vschema(self, keyspace_name):
        self.check_writable(keyspace_name)
        file_name = self.get_file_name(keyspace_name)
        if not os.path.exists(file_name):
            raise SchemaNotFoundError(f'no VSchema for keyspace {keyspace_name} in {self.data_dir}')
        os.remove(file_name)
        if os.path.exists(file_name + '.tmp'):
            os.remove(file_name + '.tmp')

    def get_keyspaces(self):
        if not os.path.isdir(self.data_dir):
            return []
        return sorted(
            file_name[:-len(self.FILE_EXTENSION)]
            for file_name in os.listdir(self.data_dir)
            if file_name.endswith(self.FILE_EXTENSION)
        )
