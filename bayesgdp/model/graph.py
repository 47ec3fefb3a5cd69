from collections import OrderedDict


class Node():
    """ A named quantity of a model graph.

    Stochastic nodes carry a distribution `kind` and its `params`; a string
    parameter value refers to another node of the graph, anything else is a
    constant. Deterministic nodes list their `parents` and describe the map
    in `formula`. Data nodes hold inputs supplied with the data payload.
    """

    STOCHASTIC_KINDS = ('normal', 'gamma', 'exponential')
    KINDS = STOCHASTIC_KINDS + ('deterministic', 'data')

    def __init__(self, kind, params=None, parents=(), shape=(),
                 observed=False, formula=None):
        if kind not in self.KINDS:
            raise ValueError("Unsupported node kind '{:s}'.".format(kind))
        if params is None:
            params = {}
        if kind == 'deterministic' and formula is None:
            raise ValueError("A deterministic node needs a formula.")
        if observed and kind not in self.STOCHASTIC_KINDS:
            raise ValueError("Only stochastic nodes can be observed.")
        self.kind = kind
        self.params = dict(params)
        self.shape = tuple(shape)
        self.observed = observed
        self.formula = formula
        parents = list(parents)
        for val in self.params.values():
            if isinstance(val, str) and val not in parents:
                parents.append(val)
        self.parents = tuple(parents)

    @property
    def is_stochastic(self):
        return self.kind in self.STOCHASTIC_KINDS

    def get_info(self):
        info = {
            'kind': self.kind,
            'params': self.params,
            'parents': self.parents,
            'shape': self.shape,
        }
        if self.observed:
            info['observed'] = True
        if self.formula is not None:
            info['formula'] = self.formula
        return info

    def __repr__(self):
        return 'Node({})'.format(
            ', '.join('{:s}={!r}'.format(k, v) for k, v in self.get_info().items())
        )


class ModelGraph():
    """ Declarative description of a Bayesian model: node name -> Node.

    The graph is handed to a sampling backend as data; the backend decides
    whether it knows how to sample it.
    """

    def __init__(self, nodes=None):
        self.nodes = OrderedDict()
        if nodes is not None:
            for name, node in nodes.items():
                self.add(name, node)

    def add(self, name, node):
        if name in self.nodes:
            raise ValueError("Node '{:s}' is already defined.".format(name))
        self.nodes[name] = node
        return self

    def __getitem__(self, name):
        return self.nodes[name]

    def __contains__(self, name):
        return name in self.nodes

    def __iter__(self):
        return iter(self.nodes)

    def __len__(self):
        return len(self.nodes)

    @property
    def names(self):
        return list(self.nodes.keys())

    def parents_of(self, name):
        return self.nodes[name].parents

    def children_of(self, name):
        return [
            child for child, node in self.nodes.items() if name in node.parents
        ]

    def stochastic_nodes(self, observed=None):
        return [
            name for name, node in self.nodes.items()
            if node.is_stochastic
            and (observed is None or node.observed == observed)
        ]

    def deterministic_nodes(self):
        return [
            name for name, node in self.nodes.items()
            if node.kind == 'deterministic'
        ]

    def data_nodes(self):
        return [name for name, node in self.nodes.items() if node.kind == 'data']

    def topological_order(self):
        """ Order the nodes so that parents precede their children.

        Raises ValueError on a reference to an undefined node or on a cycle.
        """
        for name, node in self.nodes.items():
            for parent in node.parents:
                if parent not in self.nodes:
                    raise ValueError(
                        "Node '{:s}' refers to undefined node '{:s}'."
                        .format(name, parent)
                    )
        order = []
        status = {}  # 'visiting' or 'done'

        def visit(name, path):
            if status.get(name) == 'done':
                return
            if status.get(name) == 'visiting':
                raise ValueError(
                    "Cycle in the model graph: {:s}."
                    .format(' -> '.join(path + [name]))
                )
            status[name] = 'visiting'
            for parent in self.nodes[name].parents:
                visit(parent, path + [name])
            status[name] = 'done'
            order.append(name)

        for name in self.nodes:
            visit(name, [])
        return order

    def validate(self):
        self.topological_order()
        return self

    def get_info(self):
        return {name: node.get_info() for name, node in self.nodes.items()}

    def describe(self):
        lines = []
        for name, node in self.nodes.items():
            if node.kind == 'deterministic':
                rhs = '<- {:s}'.format(node.formula)
            elif node.kind == 'data':
                rhs = '(data)'
            else:
                params = ', '.join(
                    '{:s}={}'.format(k, v) for k, v in node.params.items()
                )
                rhs = '~ {:s}({:s})'.format(node.kind.capitalize(), params)
                if node.observed:
                    rhs += ' (observed)'
            shape = '[{}]'.format(','.join(str(d) for d in node.shape)) \
                if node.shape else ''
            lines.append('{:s}{:s} {:s}'.format(name, shape, rhs))
        return '\n'.join(lines)
