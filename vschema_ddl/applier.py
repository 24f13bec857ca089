import copy
from logging import getLogger

from .ddl import (
    AddAutoIncrement,
    AddColumnVindex,
    AddSequence,
    AddTable,
    CreateVindex,
    DropAutoIncrement,
    DropColumnVindex,
    DropSequence,
    DropTable,
    DropVindex,
    action_name,
)
from .errors import (
    AlreadyDefinedOnTableError,
    AlreadyExistsError,
    AlreadyHasAutoIncrementError,
    DefinitionConflictError,
    InUseError,
    InvalidOnShardedError,
    NotFoundError,
    PreconditionFailedError,
    SchemaNotFoundError,
    SchemaStoreError,
    UnknownActionError,
)
from .vschema import SEQUENCE_TABLE_TYPE, AutoIncrement, ColumnVindex, KeyspaceSchema, Table, Vindex


logger = getLogger(__name__)


class SchemaDDLApplier:
    """Applies a single VSchema DDL action to the schema of one keyspace.

    Each call reads a fresh snapshot from the store, mutates a private copy
    of it and returns that copy. Nothing is written back: the caller saves
    the result and must serialize applications per keyspace, since the
    read-modify-write here is not versioned.
    """

    def __init__(self, store):
        self.store = store
        self.__handlers = {
            CreateVindex: self.__create_vindex,
            DropVindex: self.__drop_vindex,
            AddTable: self.__add_table,
            DropTable: self.__drop_table,
            AddColumnVindex: self.__add_column_vindex,
            DropColumnVindex: self.__drop_column_vindex,
            AddSequence: self.__add_sequence,
            DropSequence: self.__drop_sequence,
            AddAutoIncrement: self.__add_auto_increment,
            DropAutoIncrement: self.__drop_auto_increment,
        }

    def get_vschema(self, keyspace_name) -> KeyspaceSchema:
        if self.store is None or getattr(self.store, 'read_only', False):
            raise PreconditionFailedError(
                'cannot update VSchema as the schema store is read-only',
                keyspace=keyspace_name,
            )
        try:
            vschema = self.store.get_vschema(keyspace_name)
        except SchemaNotFoundError:
            logger.debug(f'no VSchema for keyspace {keyspace_name}, starting from an empty one')
            return KeyspaceSchema.empty(keyspace_name)
        except SchemaStoreError as e:
            raise SchemaStoreError(
                f'failed to get the current VSchema for the {keyspace_name} keyspace: {e}'
            ) from e
        vschema = copy.deepcopy(vschema)
        if not vschema.name:
            vschema.name = keyspace_name
        return vschema

    def apply(self, keyspace_name, action) -> KeyspaceSchema:
        vschema = self.get_vschema(keyspace_name)
        return self.apply_to(vschema, action)

    def apply_to(self, vschema: KeyspaceSchema, action) -> KeyspaceSchema:
        """Apply an action to a snapshot the caller owns exclusively."""
        handler = self.__handlers.get(type(action))
        if handler is None:
            raise UnknownActionError(
                f'unexpected vindex ddl operation {action_name(action)}',
                keyspace=vschema.name,
            )
        if vschema.tables is None:
            vschema.tables = {}
        if vschema.vindexes is None:
            vschema.vindexes = {}

        handler(vschema, action)
        logger.info(f'applied {action_name(action)} to VSchema of keyspace {vschema.name}')
        return vschema

    @staticmethod
    def __check_unsharded(vschema, operation):
        if vschema.sharded:
            raise InvalidOnShardedError(
                f'{operation}: unsupported on sharded keyspace {vschema.name}',
                keyspace=vschema.name,
            )

    @staticmethod
    def __add_vindex(vindex_name, vindex, vschema):
        # the first vindex of a keyspace makes it sharded
        if not vschema.vindexes:
            vschema.sharded = True
        vschema.vindexes[vindex_name] = vindex

    def __create_vindex(self, vschema: KeyspaceSchema, action: CreateVindex):
        name = action.vindex.name
        if name in vschema.vindexes:
            raise AlreadyExistsError(
                f'vindex {name} already exists in keyspace {vschema.name}',
                keyspace=vschema.name, vindex=name,
            )
        owner, params = action.vindex.parse_params()
        self.__add_vindex(name, Vindex(type=action.vindex.type, params=params, owner=owner), vschema)

    def __drop_vindex(self, vschema: KeyspaceSchema, action: DropVindex):
        name = action.vindex.name
        if name not in vschema.vindexes:
            raise NotFoundError(
                f'vindex {name} does not exist in keyspace {vschema.name}',
                keyspace=vschema.name, vindex=name,
            )
        table_name = vschema.find_vindex_user(name)
        if table_name is not None:
            raise InUseError(
                f'can not drop vindex {name} as it is still defined on table {table_name}',
                keyspace=vschema.name, table=table_name, vindex=name,
            )
        del vschema.vindexes[name]

    def __add_table(self, vschema: KeyspaceSchema, action: AddTable):
        self.__check_unsharded(vschema, 'add vschema table')
        if action.table in vschema.tables:
            raise AlreadyExistsError(
                f'vschema already contains table {action.table} in keyspace {vschema.name}',
                keyspace=vschema.name, table=action.table,
            )
        vschema.tables[action.table] = Table()

    def __drop_table(self, vschema: KeyspaceSchema, action: DropTable):
        self.__check_unsharded(vschema, 'drop vschema table')
        if action.table not in vschema.tables:
            raise NotFoundError(
                f'vschema does not contain table {action.table} in keyspace {vschema.name}',
                keyspace=vschema.name, table=action.table,
            )
        del vschema.tables[action.table]

    def __add_column_vindex(self, vschema: KeyspaceSchema, action: AddColumnVindex):
        # With a type the vindex is created on the fly, or must match the
        # existing definition. Without one it must already exist.
        spec = action.vindex
        name = spec.name
        new_vindex = None
        if spec.type:
            owner, params = spec.parse_params()
            vindex = vschema.vindexes.get(name)
            if vindex is not None:
                if vindex.type != spec.type:
                    raise DefinitionConflictError(
                        f'vindex {name} defined with type {vindex.type} not {spec.type}',
                        keyspace=vschema.name, table=action.table, vindex=name, field='type',
                    )
                if vindex.owner != owner:
                    raise DefinitionConflictError(
                        f'vindex {name} defined with owner {vindex.owner} not {owner}',
                        keyspace=vschema.name, table=action.table, vindex=name, field='owner',
                    )
                if (vindex.params or {}) != params:
                    raise DefinitionConflictError(
                        f'vindex {name} defined with different parameters',
                        keyspace=vschema.name, table=action.table, vindex=name, field='params',
                    )
            else:
                new_vindex = Vindex(type=spec.type, params=params, owner=owner)
        elif name not in vschema.vindexes:
            raise NotFoundError(
                f'vindex {name} does not exist in keyspace {vschema.name}',
                keyspace=vschema.name, table=action.table, vindex=name,
            )

        table = vschema.tables.get(action.table)
        if table is None:
            table = Table()
        if table.has_column_vindex(name):
            raise AlreadyDefinedOnTableError(
                f'vindex {name} already defined on table {action.table}',
                keyspace=vschema.name, table=action.table, vindex=name,
            )

        if new_vindex is not None:
            self.__add_vindex(name, new_vindex, vschema)
        table.column_vindexes.append(ColumnVindex(name=name, columns=list(action.columns)))
        vschema.tables[action.table] = table

    def __drop_column_vindex(self, vschema: KeyspaceSchema, action: DropColumnVindex):
        name = action.vindex.name
        table = vschema.tables.get(action.table)
        if table is None:
            raise NotFoundError(
                f'table {vschema.name}.{action.table} not defined in vschema',
                keyspace=vschema.name, table=action.table,
            )
        if not table.remove_column_vindex(name):
            raise NotFoundError(
                f'vindex {name} not defined in table {vschema.name}.{action.table}',
                keyspace=vschema.name, table=action.table, vindex=name,
            )
        self.__remove_table_if_empty(vschema, action.table, table)

    @staticmethod
    def __remove_table_if_empty(vschema, table_name, table):
        if table.column_vindexes:
            vschema.tables[table_name] = table
            return
        logger.debug(f'table {vschema.name}.{table_name} has no column vindexes left, removing it')
        del vschema.tables[table_name]

    def __add_sequence(self, vschema: KeyspaceSchema, action: AddSequence):
        self.__check_unsharded(vschema, 'add sequence table')
        if action.table in vschema.tables:
            raise AlreadyExistsError(
                f'vschema already contains sequence {action.table} in keyspace {vschema.name}',
                keyspace=vschema.name, table=action.table,
            )
        vschema.tables[action.table] = Table(type=SEQUENCE_TABLE_TYPE)

    def __drop_sequence(self, vschema: KeyspaceSchema, action: DropSequence):
        self.__check_unsharded(vschema, 'drop sequence table')
        if action.table not in vschema.tables:
            raise NotFoundError(
                f'vschema does not contain sequence {action.table} in keyspace {vschema.name}',
                keyspace=vschema.name, table=action.table,
            )
        del vschema.tables[action.table]

    def __get_table(self, vschema, table_name):
        table = vschema.tables.get(table_name)
        if table is None:
            raise NotFoundError(
                f'vschema does not contain table {table_name} in keyspace {vschema.name}',
                keyspace=vschema.name, table=table_name,
            )
        return table

    def __add_auto_increment(self, vschema: KeyspaceSchema, action: AddAutoIncrement):
        table = self.__get_table(vschema, action.table)
        if table.auto_increment is not None:
            raise AlreadyHasAutoIncrementError(
                f'vschema already contains auto inc {table.auto_increment} '
                f'on table {action.table} in keyspace {vschema.name}',
                keyspace=vschema.name, table=action.table,
            )
        table.auto_increment = AutoIncrement(
            column=action.auto_increment.column,
            sequence=action.auto_increment.sequence,
        )
        vschema.tables[action.table] = table

    def __drop_auto_increment(self, vschema: KeyspaceSchema, action: DropAutoIncrement):
        table = self.__get_table(vschema, action.table)
        if table.auto_increment is None:
            raise NotFoundError(
                f'vschema does not contain auto increment on table {action.table} '
                f'in keyspace {vschema.name}',
                keyspace=vschema.name, table=action.table,
            )
        table.auto_increment = None
        vschema.tables[action.table] = table


def apply_vschema_ddl(keyspace_name, store, action) -> KeyspaceSchema:
    return SchemaDDLApplier(store).apply(keyspace_name, action)
