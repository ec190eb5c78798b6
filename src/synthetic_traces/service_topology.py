"""
Service Topology Builder

Builds the application/service/operation tree from a declarative document
(or synthesizes a random one), links call references into a call graph and
rejects call graphs with loops.
"""

import logging
import os
import random
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import networkx as nx
import yaml

from .application import Application
from .operation import DEFAULT_ERROR_CHANCE, CallReference, Operation
from .service import Service

logger = logging.getLogger("topology-builder")

WORDLISTS_FILE = Path(__file__).parent / 'wordlists.yaml'


class ConfigurationError(ValueError):
    """The topology document cannot be turned into a valid topology."""


class CircularReferenceError(ValueError):
    """The call graph contains a loop."""


class Topology:
    """
    The collection of applications and entrypoints to use when simulating traces.

    Applications own services, services own operations. Calls between
    operations are plain references into the same tree and may cross
    service and application boundaries.
    """

    def __init__(self, applications: Dict[str, Application],
                 entrypoint_slugs: Optional[List[str]] = None,
                 rng: Optional[random.Random] = None):
        self._applications = dict(applications)
        self.entrypoint_slugs = list(entrypoint_slugs or [])
        self.rng = rng or random.Random()

    def applications(self) -> List[Application]:
        return list(self._applications.values())

    def get_application(self, name: str) -> Optional[Application]:
        return self._applications.get(name)

    def operations(self) -> Iterable[Operation]:
        """Every operation in application, service, operation order."""
        for app in self._applications.values():
            for service in app.services.values():
                yield from service.operations.values()

    def get_operation(self, slug: str) -> Optional[Operation]:
        """Look up an operation by its ``application.service.operation`` slug."""
        parts = slug.split('.')
        if len(parts) != 3:
            return None
        app = self.get_application(parts[0])
        service = app.get_service(parts[1]) if app else None
        return service.get_operation(parts[2]) if service else None

    def entrypoints(self) -> List[Operation]:
        """
        Get the trace entrypoints.

        With an explicit slug list only the listed operations qualify,
        otherwise every operation does.
        """
        wanted = set(self.entrypoint_slugs)
        entries = []
        for app in self._applications.values():
            for service in app.services.values():
                for operation in service.operations.values():
                    slug = f"{app.name}.{service.name}.{operation.name}"
                    if not wanted or slug in wanted:
                        entries.append(operation)
        return entries

    def random_entrypoint(self, rng: Optional[random.Random] = None) -> Operation:
        entries = self.entrypoints()
        if not entries:
            raise ValueError("Topology has no entrypoints")
        return (rng or self.rng).choice(entries)

    def resolve(self, reference: CallReference, rng: Optional[random.Random] = None) -> Optional[Operation]:
        """
        Find the operation a call reference points to.

        Returns None when the application or service does not exist. A blank
        or unknown operation name resolves to a random operation of the
        service.
        """
        app = self.get_application(reference.application)
        if app is None:
            return None
        service = app.get_service(reference.service)
        if service is None:
            return None
        if reference.name and reference.name in service.operations:
            return service.operations[reference.name]
        if reference.name:
            logger.warning(f"Operation {reference.slug} not found, calling a random operation of "
                           f"{reference.application}.{reference.service} instead")
        return service.random_operation(rng or self.rng)

    def call_graph(self) -> nx.DiGraph:
        """Build a NetworkX directed graph of operation slugs and their calls."""
        graph = nx.DiGraph()
        for operation in self.operations():
            graph.add_node(operation.slug, application=operation.application, service=operation.service)
        for operation in self.operations():
            for call in operation.calls:
                if graph.has_edge(operation.slug, call.slug):
                    graph[operation.slug][call.slug]['weight'] += 1
                else:
                    graph.add_edge(operation.slug, call.slug, weight=1)
        return graph


def check_call_graph(topology: Topology) -> None:
    """
    Walk the calls of every operation and fail on the first loop found.

    Raises:
        CircularReferenceError: naming both ends of the edge that closes the loop
    """
    verified = set()
    for operation in topology.operations():
        _check_calls(operation, [], verified)


def _check_calls(operation: Operation, ancestors: List[Operation], verified: set) -> None:
    if id(operation) in verified:
        return
    path = ancestors + [operation]
    for call in operation.calls:
        if any(call is ancestor for ancestor in path):
            raise CircularReferenceError(
                f"Operation {operation.slug} has circular reference to {call.slug}")
        _check_calls(call, path, verified)
    verified.add(id(operation))


def load_wordlists(path: Path = WORDLISTS_FILE) -> Dict[str, List[str]]:
    with open(path, 'r') as f:
        return yaml.safe_load(f)


class TopologyBuilder:
    """
    Turns a raw topology document into a linked, validated Topology.

    Args:
        app_count: for a random topology, how many applications to create
        services_per_app: for a random topology, how many services per application
        operations_per_service: for a random topology, how many operations per service
        internal_calls_per_app: for a random topology, how many calls inside each service
        default_error_chance: error chance of operations that do not set one
        rng: random source for synthesis, reference fixup and generated traces
        wordlists: names to draw from when synthesizing
    """

    def __init__(self, app_count: int = 10, services_per_app: int = 50,
                 operations_per_service: int = 10, internal_calls_per_app: int = 3,
                 default_error_chance: float = DEFAULT_ERROR_CHANCE,
                 rng: Optional[random.Random] = None,
                 wordlists: Optional[Dict[str, List[str]]] = None):
        self.app_count = app_count
        self.services_per_app = services_per_app
        self.operations_per_service = operations_per_service
        self.internal_calls_per_app = internal_calls_per_app
        self.default_error_chance = default_error_chance
        self.rng = rng or random.Random()
        self.wordlists = wordlists

    def load(self, source) -> Topology:
        """Build a topology from YAML text, a file path or an open stream; None means random."""
        if isinstance(source, os.PathLike) or (isinstance(source, str) and os.path.isfile(source)):
            return self.load_file(source)
        try:
            raw = yaml.safe_load(source) if source is not None else None
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid topology document: {e}") from e
        return self.build(raw)

    def load_file(self, path: Union[str, os.PathLike]) -> Topology:
        logger.info(f"Loading topology from: {path}")
        with open(path, 'r') as f:
            return self.load(f)

    def build(self, raw: Optional[Dict]) -> Topology:
        """
        Build the topology.

        Raises:
            ConfigurationError: malformed document or invalid operation settings
            CircularReferenceError: the resulting call graph has a loop
        """
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigurationError("Topology document must be a mapping")

        entrypoints = raw.get('entrypoints') or []
        if not isinstance(entrypoints, list) or not all(isinstance(e, str) for e in entrypoints):
            raise ConfigurationError("entrypoints must be a list of application.service.operation slugs")

        raw_apps = raw.get('applications') or {}
        if raw_apps:
            topology = Topology(self._parse_applications(raw_apps), entrypoints, rng=self.rng)
            self._link_calls(topology)
        else:
            logger.info("No applications configured, synthesizing a random topology")
            topology = Topology(self._create_random_apps(), entrypoints, rng=self.rng)
            self._create_random_calls(topology)

        check_call_graph(topology)

        for slug in entrypoints:
            if topology.get_operation(slug) is None:
                logger.warning(f"Entrypoint {slug} does not match any operation")

        services = sum(len(app.services) for app in topology.applications())
        logger.info(f"Built topology: {len(topology.applications())} applications, "
                    f"{services} services, {len(list(topology.operations()))} operations, "
                    f"{len(topology.entrypoints())} entrypoints")
        return topology

    # Configured topologies

    def _parse_applications(self, raw_apps) -> Dict[str, Application]:
        if not isinstance(raw_apps, dict):
            raise ConfigurationError("applications must be a mapping of name to application")

        applications = {}
        for app_name, raw_app in raw_apps.items():
            raw_app = self._mapping(raw_app, f"application {app_name}")
            app_name = str(app_name)
            services = {}
            raw_services = self._mapping(raw_app.get('services'), f"services of {app_name}")
            for service_name, raw_service in raw_services.items():
                service_name = str(service_name)
                services[service_name] = self._parse_service(app_name, service_name, raw_service)
            # The mapping key names the application; a name field is ignored
            applications[app_name] = Application(app_name, services, rng=self.rng)
        return applications

    def _parse_service(self, app_name: str, service_name: str, raw_service) -> Service:
        raw_service = self._mapping(raw_service, f"service {app_name}.{service_name}")
        operations = {}
        raw_operations = self._mapping(raw_service.get('operations'),
                                       f"operations of {app_name}.{service_name}")
        for op_name, raw_op in raw_operations.items():
            op_name = str(op_name)
            operations[op_name] = self._parse_operation(app_name, service_name, op_name, raw_op)

        try:
            base_latency = int(raw_service.get('baseLatency') or 0)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid baseLatency for service {app_name}.{service_name}") from e

        service = Service(service_name, app_name, tags=self._tags(raw_service.get('tags')),
                          base_latency=base_latency, rng=self.rng)
        service.set_operations(operations)
        return service

    def _parse_operation(self, app_name: str, service_name: str, op_name: str, raw_op) -> Operation:
        raw_op = self._mapping(raw_op, f"operation {app_name}.{service_name}.{op_name}")
        error_chance = raw_op.get('errorChance')
        if error_chance is None:
            error_chance = self.default_error_chance
        kwargs = {}
        if raw_op.get('source'):
            kwargs['source'] = str(raw_op['source'])
        try:
            operation = Operation(op_name, service_name, app_name,
                                  tags=self._tags(raw_op.get('tags')),
                                  error_chance=float(error_chance), rng=self.rng, **kwargs)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid operation {app_name}.{service_name}.{op_name}: {e}") from e

        raw_calls = raw_op.get('calls') or []
        if not isinstance(raw_calls, list):
            raise ConfigurationError(f"calls of {operation.slug} must be a list")
        for raw_call in raw_calls:
            raw_call = self._mapping(raw_call, f"call of {operation.slug}")
            # Unqualified targets live next to the caller
            operation.call_references.append(CallReference(
                application=str(raw_call.get('application') or app_name),
                service=str(raw_call.get('service') or service_name),
                name=str(raw_call['name']) if raw_call.get('name') else None,
            ))
        return operation

    def _link_calls(self, topology: Topology) -> None:
        for operation in topology.operations():
            for reference in operation.call_references:
                target = topology.resolve(reference, self.rng)
                if target is None:
                    logger.warning(f"Dropping call from {operation.slug} to unknown "
                                   f"{reference.application}.{reference.service}")
                    continue
                operation.add_call(target)

    @staticmethod
    def _mapping(value, what: str) -> Dict:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigurationError(f"Expected a mapping for {what}, got {type(value).__name__}")
        return value

    @staticmethod
    def _tags(value) -> Dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigurationError(f"tags must be a mapping, got {type(value).__name__}")
        return {str(k): str(v) for k, v in value.items()}

    # Random topologies

    def _draw(self, names: List[str], count: int) -> List[str]:
        """Draw up to ``count`` names without replacement."""
        pool = list(names)
        drawn = []
        while pool and len(drawn) < count:
            drawn.append(pool.pop(self.rng.randrange(len(pool))))
        return drawn

    def _create_random_apps(self) -> Dict[str, Application]:
        words = self.wordlists or load_wordlists()
        applications = {}
        for app_name in self._draw(words.get('applications', []), self.app_count):
            services = {}
            for service_name in self._draw(words.get('services', []), self.services_per_app):
                operations = {}
                for op_name in self._draw(words.get('operations', []), self.operations_per_service):
                    try:
                        operations[op_name] = Operation(op_name, service_name, app_name,
                                                        error_chance=self.default_error_chance,
                                                        rng=self.rng)
                    except (TypeError, ValueError) as e:
                        raise ConfigurationError(f"Invalid default error chance: {e}") from e
                services[service_name] = Service(service_name, app_name, operations, rng=self.rng)
            applications[app_name] = Application(app_name, services, rng=self.rng)
        return applications

    def _create_random_calls(self, topology: Topology) -> None:
        graph = nx.DiGraph()
        graph.add_nodes_from(topology.operations())
        skipped = []

        def link(source: Operation, target: Operation):
            # Skip candidates that would close a loop
            if source is target or nx.has_path(graph, target, source):
                logger.debug(f"Skipping random call {source.slug} -> {target.slug}")
                skipped.append((source, target))
                return
            graph.add_edge(source, target)
            source.add_call(target)

        # internal calls per service
        for app in topology.applications():
            for service in app.services.values():
                available = list(service.operations.values())
                for _ in range(self.internal_calls_per_app):
                    if len(available) < 2:
                        break
                    source = available.pop(self.rng.randrange(len(available)))
                    link(source, self.rng.choice(available))

        # cross service calls per app
        for app in topology.applications():
            available = [s for s in app.services.values() if s.operations]
            while len(available) > 1:
                service = available.pop(self.rng.randrange(len(available)))
                source = service.random_operation(self.rng)
                target = self.rng.choice(available).random_operation(self.rng)
                link(source, target)

        # cross app calls
        apps = [a for a in topology.applications() if any(s.operations for s in a.services.values())]
        if len(apps) > 1:
            for app in apps:
                source = self._random_operation(app)
                target = self._random_operation(self.rng.choice(apps))
                while target.application == source.application:
                    target = self._random_operation(self.rng.choice(apps))
                link(source, target)

        if skipped:
            logger.info(f"Random topology: kept {graph.number_of_edges()} calls, "
                        f"skipped {len(skipped)} that would have closed a loop")

    def _random_operation(self, app: Application) -> Operation:
        services = [s for s in app.services.values() if s.operations]
        return self.rng.choice(services).random_operation(self.rng)
