from dataclasses import dataclass, field

from .errors import UnknownActionError


VINDEX_OWNER_PARAM = 'owner'


def strip_sql_name(name):
    name = name.strip()
    if name.startswith('`'):
        name = name[1:]
    if name.endswith('`'):
        name = name[:-1]
    return name


@dataclass
class VindexSpec:
    name: str = ''
    type: str = ''
    params: list[str] = field(default_factory=list)
    owner: str = ''

    def parse_params(self):
        """Split raw ``key=value`` params into (owner, params).

        An ``owner`` key is lifted out of the params. An explicit owner on the
        spec takes precedence over it.
        """
        owner = ''
        params = {}
        for raw_param in self.params:
            key, sep, value = raw_param.partition('=')
            if not sep:
                raise ValueError(f'vindex {self.name} param {raw_param!r} should be key=value')
            key = key.strip()
            value = value.strip()
            if key.lower() == VINDEX_OWNER_PARAM:
                owner = value
            else:
                params[key] = value
        if self.owner:
            owner = self.owner
        return owner, params


@dataclass
class AutoIncSpec:
    column: str = ''
    sequence: str = ''


@dataclass
class CreateVindex:
    vindex: VindexSpec


@dataclass
class DropVindex:
    vindex: VindexSpec


@dataclass
class AddTable:
    table: str


@dataclass
class DropTable:
    table: str


@dataclass
class AddColumnVindex:
    table: str
    vindex: VindexSpec
    columns: list[str] = field(default_factory=list)


@dataclass
class DropColumnVindex:
    table: str
    vindex: VindexSpec


@dataclass
class AddSequence:
    table: str


@dataclass
class DropSequence:
    table: str


@dataclass
class AddAutoIncrement:
    table: str
    auto_increment: AutoIncSpec


@dataclass
class DropAutoIncrement:
    table: str


ACTIONS = {
    'create_vindex': CreateVindex,
    'drop_vindex': DropVindex,
    'add_table': AddTable,
    'drop_table': DropTable,
    'add_column_vindex': AddColumnVindex,
    'drop_column_vindex': DropColumnVindex,
    'add_sequence': AddSequence,
    'drop_sequence': DropSequence,
    'add_auto_increment': AddAutoIncrement,
    'drop_auto_increment': DropAutoIncrement,
}

ACTION_NAMES = {action_cls: name for name, action_cls in ACTIONS.items()}


def action_name(action):
    return ACTION_NAMES.get(type(action), type(action).__name__)


def _vindex_spec_from_dict(data):
    if isinstance(data, str):
        return VindexSpec(name=strip_sql_name(data))
    if not isinstance(data, dict):
        raise ValueError(f'vindex should be a name or a mapping and not {type(data).__name__}')
    data = dict(data)
    params = data.pop('params', [])
    if isinstance(params, dict):
        params = [f'{key}={value}' for key, value in params.items()]
    spec = VindexSpec(
        name=strip_sql_name(data.pop('name', '')),
        type=data.pop('type', '') or '',
        params=[str(param) for param in params],
        owner=data.pop('owner', '') or '',
    )
    if data:
        raise ValueError(f'Unsupported vindex options: {list(data.keys())}')
    if not spec.name:
        raise ValueError('vindex name is required')
    return spec


def action_from_dict(data):
    """Build a DDL action from a mapping such as one loaded from YAML.

    Example::

        {'action': 'add_column_vindex', 'table': 't1',
         'vindex': {'name': 'hash_vdx', 'type': 'hash'}, 'columns': ['id']}
    """
    data = dict(data)
    name = data.pop('action', None)
    action_cls = ACTIONS.get(name)
    if action_cls is None:
        raise UnknownActionError(f'unexpected vindex ddl operation {name}')

    kwargs = {}
    if action_cls in (CreateVindex, DropVindex, AddColumnVindex, DropColumnVindex):
        kwargs['vindex'] = _vindex_spec_from_dict(data.pop('vindex', None))
    if action_cls not in (CreateVindex, DropVindex):
        table = data.pop('table', '')
        if not table:
            raise ValueError(f'{name} requires a table')
        kwargs['table'] = strip_sql_name(table)
    if action_cls is AddColumnVindex:
        columns = data.pop('columns', [])
        if not isinstance(columns, list):
            raise ValueError(f'{name} columns should be a list and not {type(columns).__name__}')
        kwargs['columns'] = [strip_sql_name(str(column)) for column in columns]
    if action_cls is AddAutoIncrement:
        auto_increment = dict(data.pop('auto_increment', {}) or {})
        kwargs['auto_increment'] = AutoIncSpec(
            column=strip_sql_name(auto_increment.pop('column', '')),
            sequence=auto_increment.pop('sequence', ''),
        )
        if auto_increment:
            raise ValueError(f'Unsupported auto_increment options: {list(auto_increment.keys())}')

    if data:
        raise ValueError(f'Unsupported {name} options: {list(data.keys())}')
    return action_cls(**kwargs)
