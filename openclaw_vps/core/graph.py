"""
ResourceGraph: ordered, reference-checked declaration of Pulumi resources.

Each call to :meth:`ResourceGraph.declare` registers exactly one resource
with the Pulumi engine and returns a :class:`ResourceHandle`. A declaration
may only reference handles returned earlier by the same graph, so the
reference graph is acyclic by construction. The reference is recorded in the
underlying :class:`DAG` before the resource is constructed.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

import pulumi

from openclaw_vps.core.dag import DAG
from openclaw_vps.errors import ResourceDeclarationRejectedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceSpec:
    """Desired state of one resource: what it is and what it references."""

    kind: str
    """Pulumi type token, e.g. ``aws:ec2/securityGroup:SecurityGroup``"""

    name: str
    """Logical resource name, unique within the graph"""

    properties: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    """Constructor arguments (read-only)"""

    references: tuple[str, ...] = ()
    """Names of previously declared resources this one depends on"""


@dataclass(frozen=True)
class ResourceHandle:
    """A declared resource, usable as a reference by later declarations."""

    spec: ResourceSpec
    resource: pulumi.Resource
    index: int
    graph_id: int = field(repr=False, default=0)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def kind(self) -> str:
        return self.spec.kind

    @property
    def id(self) -> pulumi.Output[str]:
        """The provider-assigned id, known once the resource is created."""
        return self.resource.id

    def get(self, attribute: str) -> pulumi.Output[Any]:
        """Get an output attribute of the underlying resource."""
        try:
            return getattr(self.resource, attribute)
        except AttributeError:
            raise AttributeError(
                f"{self.kind} '{self.name}' has no output '{attribute}'"
            ) from None


class ResourceGraph:
    """
    Builder for a fixed set of interdependent resources.

    Example:
        graph = ResourceGraph()
        sg = graph.declare(
            "aws:ec2/securityGroup:SecurityGroup",
            "web-sg",
            {"description": "web"},
        )
        lt = graph.declare(
            "aws:ec2/launchTemplate:LaunchTemplate",
            "web-lt",
            {"vpc_security_group_ids": [sg.id]},
            references=[sg],
        )
        graph.declaration_order()  # ["web-sg", "web-lt"]
    """

    def __init__(self, kinds: Mapping[str, type] | None = None):
        """
        Create an empty graph.

        Args:
            kinds: Mapping of type token to Pulumi resource class. Defaults
                to the AWS kinds this project declares.
        """
        if kinds is None:
            from openclaw_vps.aws.resources import AWS_RESOURCE_KINDS
            kinds = AWS_RESOURCE_KINDS
        self._kinds: dict[str, type] = dict(kinds)
        self._handles: dict[str, ResourceHandle] = {}
        self._dag = DAG()

    def register_kind(self, kind: str, resource_cls: type) -> None:
        """Make an additional resource type available to :meth:`declare`."""
        self._kinds[kind] = resource_cls

    def declare(
        self,
        kind: str,
        name: str,
        properties: Mapping[str, Any] | None = None,
        references: Iterable[ResourceHandle] = (),
        opts: pulumi.ResourceOptions | None = None,
    ) -> ResourceHandle:
        """
        Declare one resource and register it with the Pulumi engine.

        Args:
            kind: Registered type token
            name: Logical name, unique within this graph
            properties: Constructor arguments; may contain outputs of
                referenced handles
            references: Handles this resource depends on
            opts: Extra Pulumi resource options

        Returns:
            Handle for use as a reference by later declarations

        Raises:
            ResourceDeclarationRejectedError: If the kind is unknown, the name
                is taken, a reference is not from this graph, or Pulumi
                rejects the resource arguments
        """
        resource_cls = self._kinds.get(kind)
        if resource_cls is None:
            raise ResourceDeclarationRejectedError(kind, name, "unknown resource kind")
        if name in self._handles:
            raise ResourceDeclarationRejectedError(kind, name, "name already declared")

        references = list(references)
        for ref in references:
            self._check_reference(ref, kind, name)

        spec = ResourceSpec(
            kind=kind,
            name=name,
            properties=MappingProxyType(dict(properties or {})),
            references=tuple(ref.name for ref in references),
        )

        if references:
            opts = pulumi.ResourceOptions.merge(
                opts,
                pulumi.ResourceOptions(depends_on=[ref.resource for ref in references]),
            )

        try:
            self._dag.add_node(
                name,
                kind,
                dependencies=spec.references,
                metadata={"properties": sorted(spec.properties)},
            )
        except ValueError as e:
            raise ResourceDeclarationRejectedError(kind, name, str(e)) from e

        try:
            resource = resource_cls(name, **spec.properties, opts=opts)
        except Exception as e:
            self._dag.remove_node(name)
            raise ResourceDeclarationRejectedError(kind, name, str(e)) from e

        handle = ResourceHandle(
            spec=spec,
            resource=resource,
            index=len(self._handles),
            graph_id=id(self),
        )
        self._handles[name] = handle
        logger.info("Declared %s '%s'", kind, name)
        return handle

    def _check_reference(self, ref: Any, kind: str, name: str) -> None:
        if not isinstance(ref, ResourceHandle):
            raise ResourceDeclarationRejectedError(
                kind, name, f"reference {ref!r} is not a resource handle"
            )
        if ref.graph_id != id(self) or self._handles.get(ref.name) is not ref:
            raise ResourceDeclarationRejectedError(
                kind, name, f"reference '{ref.name}' was not declared by this graph"
            )

    @property
    def handles(self) -> tuple[ResourceHandle, ...]:
        """All handles in declaration order."""
        return tuple(self._handles.values())

    def get(self, name: str) -> ResourceHandle | None:
        """Get a handle by name."""
        return self._handles.get(name)

    def declaration_order(self) -> list[str]:
        """Names in an order that respects every reference."""
        return self._dag.topological_sort()

    def dependencies(self, name: str) -> list[str]:
        """Names of the resources *name* references."""
        return list(self._dag.get_dependencies(name))

    def to_dict(self) -> dict[str, Any]:
        """Graph structure with property names only, never values."""
        return self._dag.to_dict()

    def __len__(self) -> int:
        return len(self._handles)

    def __repr__(self) -> str:
        return f"ResourceGraph(resources={len(self._handles)})"
