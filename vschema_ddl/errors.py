"""Errors raised while applying VSchema DDL."""


class VSchemaDDLError(Exception):
    """Base exception for a DDL action that cannot be applied."""

    def __init__(self, message, keyspace=None, table=None, vindex=None):
        super().__init__(message)
        self.keyspace = keyspace
        self.table = table
        self.vindex = vindex


class PreconditionFailedError(VSchemaDDLError):
    """Raised when there is no writable path to the schema store."""

    pass


class AlreadyExistsError(VSchemaDDLError):
    """Raised when a create-style action targets a name that is already present."""

    pass


class AlreadyHasAutoIncrementError(AlreadyExistsError):
    """Raised when a table already carries an auto increment."""

    pass


class NotFoundError(VSchemaDDLError):
    """Raised when a drop or modify action targets something that is absent."""

    pass


class InUseError(VSchemaDDLError):
    """Raised when dropping a vindex that a table still references."""

    pass


class InvalidOnShardedError(VSchemaDDLError):
    """Raised for plain or sequence table changes on a sharded keyspace."""

    pass


class DefinitionConflictError(VSchemaDDLError):
    """Raised when a vindex definition differs from the existing vindex."""

    def __init__(self, message, keyspace=None, table=None, vindex=None, field=None):
        super().__init__(message, keyspace=keyspace, table=table, vindex=vindex)
        self.field = field


class AlreadyDefinedOnTableError(VSchemaDDLError):
    """Raised when the table already has a column vindex with that name."""

    pass


class UnknownActionError(VSchemaDDLError):
    """Raised for an action that is not a known DDL operation."""

    pass


class SchemaStoreError(Exception):
    """Raised when the schema store cannot be read or written."""

    pass


class SchemaNotFoundError(SchemaStoreError):
    """Raised when the store holds no schema for a keyspace."""

    pass
