from dataclasses import dataclass, field


SEQUENCE_TABLE_TYPE = 'sequence'


@dataclass
class ColumnVindex:
    name: str = ''
    columns: list[str] = field(default_factory=list)

    def to_dict(self):
        data = {'name': self.name}
        if self.columns:
            data['columns'] = list(self.columns)
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            name=str(data.get('name') or ''),
            columns=[str(column) for column in data.get('columns') or []],
        )


@dataclass
class AutoIncrement:
    column: str = ''
    sequence: str = ''

    def to_dict(self):
        return {'column': self.column, 'sequence': self.sequence}

    @classmethod
    def from_dict(cls, data):
        return cls(
            column=str(data.get('column') or ''),
            sequence=str(data.get('sequence') or ''),
        )


@dataclass
class Vindex:
    type: str = ''
    params: dict[str, str] = field(default_factory=dict)
    owner: str = ''

    def to_dict(self):
        data = {'type': self.type}
        if self.params:
            data['params'] = dict(self.params)
        if self.owner:
            data['owner'] = self.owner
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            type=str(data.get('type') or ''),
            params={
                str(key): '' if value is None else str(value)
                for key, value in (data.get('params') or {}).items()
            },
            owner=str(data.get('owner') or ''),
        )


@dataclass
class Table:
    type: str = ''
    column_vindexes: list[ColumnVindex] = field(default_factory=list)
    auto_increment: AutoIncrement = None

    def has_column_vindex(self, vindex_name):
        for column_vindex in self.column_vindexes:
            if column_vindex.name == vindex_name:
                return True
        return False

    def remove_column_vindex(self, vindex_name):
        for idx, column_vindex in enumerate(self.column_vindexes):
            if column_vindex.name == vindex_name:
                del self.column_vindexes[idx]
                return True
        return False

    def to_dict(self):
        data = {}
        if self.type:
            data['type'] = self.type
        if self.column_vindexes:
            data['column_vindexes'] = [cv.to_dict() for cv in self.column_vindexes]
        if self.auto_increment is not None:
            data['auto_increment'] = self.auto_increment.to_dict()
        return data

    @classmethod
    def from_dict(cls, data):
        auto_increment = data.get('auto_increment')
        return cls(
            type=str(data.get('type') or ''),
            column_vindexes=[
                ColumnVindex.from_dict(cv) for cv in data.get('column_vindexes') or []
            ],
            auto_increment=AutoIncrement.from_dict(auto_increment) if auto_increment else None,
        )


@dataclass
class KeyspaceSchema:
    """Sharding description of a single keyspace.

    Tables reference vindexes by name only, so a column vindex may point at a
    vindex that no longer exists; readers must look it up and not assume it.
    """

    name: str = ''
    sharded: bool = False
    tables: dict[str, Table] = field(default_factory=dict)
    vindexes: dict[str, Vindex] = field(default_factory=dict)

    @classmethod
    def empty(cls, name):
        return cls(name=name)

    def find_vindex_user(self, vindex_name):
        """Return the name of the first table using the vindex, or None."""
        for table_name, table in self.tables.items():
            if table.has_column_vindex(vindex_name):
                return table_name
        return None

    def to_dict(self):
        data = {}
        if self.sharded:
            data['sharded'] = True
        if self.vindexes:
            data['vindexes'] = {
                name: vindex.to_dict() for name, vindex in self.vindexes.items()
            }
        if self.tables:
            data['tables'] = {
                name: table.to_dict() for name, table in self.tables.items()
            }
        return data

    @classmethod
    def from_dict(cls, name, data):
        data = data or {}
        return cls(
            name=name,
            sharded=bool(data.get('sharded', False)),
            tables={
                str(table_name): Table.from_dict(table or {})
                for table_name, table in (data.get('tables') or {}).items()
            },
            vindexes={
                str(vindex_name): Vindex.from_dict(vindex or {})
                for vindex_name, vindex in (data.get('vindexes') or {}).items()
            },
        )
