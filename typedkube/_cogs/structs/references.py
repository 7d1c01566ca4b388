"""
References to the resource kinds and to the individual objects in the API.

A *kind* is what the objects declare in their bodies (``apiVersion`` & ``kind``)
and what the Python classes are registered as (see :mod:`schemes`).
A *resource* is how the API server addresses the objects of that kind in URLs:
by an API group, an API version, and a plural name, either under a namespace
or cluster-wide. The mapping from kinds to resources comes from discovery.
"""
import dataclasses
import urllib.parse
from typing import Any, FrozenSet, Iterator, List, Mapping, NamedTuple, NewType, Optional, \
                   Sequence, Tuple, Union

# A specific really existing addressable namespace (at least, the one assumed to be so).
# Made as a NewType for stricter type-checking to avoid collisions with other strings.
NamespaceName = NewType('NamespaceName', str)

# A namespace reference usable in the API calls. `None` means cluster-wide API calls.
Namespace = Optional[NamespaceName]

# Query parameters as they go to the URLs: repeated keys are allowed, hence the pairs.
QueryParams = Union[Mapping[str, str], Sequence[Tuple[str, str]]]


class GroupVersionKind(NamedTuple):
    """
    A type identity of an object: its API group, version, and kind.

    For the Core v1 API (pods, namespaces, etc), the group is an empty string.
    """
    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        # Strip heading/trailing slashes if group is absent (e.g. for pods).
        return f'{self.group}/{self.version}'.strip('/')

    @classmethod
    def parse(cls, api_version: str, kind: str) -> "GroupVersionKind":
        group, _, version = api_version.rpartition('/')
        return cls(group, version, kind)

    def __str__(self) -> str:
        return f'{self.api_version}, Kind={self.kind}'


class ObjectKey(NamedTuple):
    """
    An identity of a specific object for point lookups: its name & namespace.

    The namespace is ignored for cluster-scoped resources.
    """
    name: str
    namespace: Namespace = None

    def __str__(self) -> str:
        return self.name if not self.namespace else f'{self.namespace}/{self.name}'

    @classmethod
    def from_object(cls, obj: Mapping[str, Any]) -> "ObjectKey":
        metadata = obj.get('metadata', {})
        return cls(name=metadata.get('name', ''), namespace=metadata.get('namespace'))


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Resource:
    """
    A reference to a very specific custom or built-in resource kind.

    It is used to form the K8s API URLs. Generally, K8s API only needs
    an API group, an API version, and a plural name of the resource.
    All other names are remembered for logging and informational purposes.

    Once discovered, a resource never changes: it reflects the static
    registration of the kind in the API server, not any state of its objects.
    """

    group: str
    """
    The resource's API group; e.g. ``"apps"``, ``"batch"``, ``"example.com"``.
    For Core v1 API resources, an empty string: ``""``.
    """

    version: str
    """
    The resource's API version; e.g. ``"v1"``, ``"v1beta1"``, etc.
    """

    plural: str
    """
    The resource's plural name; e.g. ``"pods"``, ``"deployments"``.
    It is used as an API endpoint, together with API group & version.
    """

    kind: Optional[str] = None
    """
    The resource's kind (as in YAML files); e.g. ``"Pod"``, ``"Deployment"``.
    """

    singular: Optional[str] = None
    """
    The resource's singular name; e.g. ``"pod"``, ``"deployment"``.
    """

    shortcuts: FrozenSet[str] = frozenset()
    """
    The resource's short names; e.g. ``{"po"}``, ``{"deploy"}``.
    """

    subresources: FrozenSet[str] = frozenset()
    """
    The resource's subresources, if defined; e.g. ``{"status", "scale"}``.
    """

    namespaced: bool = True
    """
    Whether the resource is namespaced (``True``) or cluster-scoped (``False``).
    """

    verbs: FrozenSet[str] = frozenset()
    """
    All available verbs for the resource, as supported by K8s API;
    e.g., ``{"list", "watch", "create", "update", "delete", "patch"}``.
    Note that it is not the same as all verbs permitted by RBAC.
    """

    def __hash__(self) -> int:
        return hash((self.group, self.version, self.plural))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Resource):
            self_tuple = (self.group, self.version, self.plural)
            other_tuple = (other.group, other.version, other.plural)
            return self_tuple == other_tuple
        else:
            return NotImplemented

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    # Mostly for tests, to be used as `Resource(*resource)`.
    def __iter__(self) -> Iterator[str]:
        return iter((self.group, self.version, self.plural))

    @property
    def api_version(self) -> str:
        # Strip heading/trailing slashes if group is absent (e.g. for pods).
        return f'{self.group}/{self.version}'.strip('/')

    @property
    def gvk(self) -> GroupVersionKind:
        return GroupVersionKind(self.group, self.version, self.kind or '')

    def get_url(
            self,
            *,
            server: Optional[str] = None,
            namespace: Namespace = None,
            name: Optional[str] = None,
            subresource: Optional[str] = None,
            params: Optional[QueryParams] = None,
    ) -> str:
        if subresource is not None and name is None:
            raise ValueError("Subresources can be used only with specific resources by names.")

        # The namespace is not checked against the resource's scope here:
        # it is the callers' job to pass it only for the namespaced resources.
        return self._build_url(server, params, [
            '/api' if self.group == '' and self.version == 'v1' else '/apis',
            self.group,
            self.version,
            'namespaces' if namespace is not None else None,
            namespace,
            self.plural,
            name,
            subresource,
        ])

    def _build_url(
            self,
            server: Optional[str],
            params: Optional[QueryParams],
            parts: List[Optional[str]],
    ) -> str:
        query = urllib.parse.urlencode(params, encoding='utf-8') if params else ''
        path = '/'.join([part for part in parts if part])
        url = path + ('?' if query else '') + query
        return url if server is None else server.rstrip('/') + '/' + url.lstrip('/')
